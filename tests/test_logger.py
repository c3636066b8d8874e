#!/usr/bin/env python3
"""
Logger level tests
"""

import logging
import unittest

from brewbarn.utils.logger import get_logger, set_level


class TestLoggerLevel(unittest.TestCase):

    def tearDown(self):
        set_level("INFO")

    def test_level_by_name(self):
        set_level("debug")
        self.assertEqual(get_logger().level, logging.DEBUG)

    def test_unknown_level_falls_back_to_info(self):
        set_level("chatty")
        self.assertEqual(get_logger().level, logging.INFO)


if __name__ == '__main__':
    unittest.main()
