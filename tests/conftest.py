"""Pin the environment before any brewbarn module reads its configuration."""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["USE_REDIS"] = "false"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ.pop("RESEND_API_KEY", None)
