"""Controller / orchestrator for one virtual barista request.

Look up the customer, decide on a discount, build the prompt, call the LLM
and pick any new discount code out of the reply. Nothing is retried.
"""
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .generate import GenerationClient
from .postprocess import Postprocessor
from .prompt_builder import PromptBuilder
from ..agents.discount_agent import DiscountAgent
from ..data.repository import StoreRepository
from ..schemas.io_models import (BaristaRequest, BaristaResponse, CustomerContext, MenuItemRecord,
                                 OrderRecord, ProfileRecord)
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger()


class BaristaRequestError(Exception):
    """The request body is missing something the barista needs."""


class Controller:
    def __init__(self, discount_agent: Optional[DiscountAgent] = None,
                 client_factory: Callable[[], GenerationClient] = GenerationClient):
        self.discount_agent = discount_agent or DiscountAgent()
        self.client_factory = client_factory
        self.builder = PromptBuilder()
        self.postprocessor = Postprocessor()

    # Lookups degrade to empty values.

    def _load_profile(self, repo: StoreRepository, user_id: str) -> Optional[ProfileRecord]:
        try:
            return repo.get_profile(user_id)
        except SQLAlchemyError as e:
            logger.error(f"[BARISTA] Error fetching user profile: {e}")
            return None

    def _load_orders(self, repo: StoreRepository, user_id: str) -> List[OrderRecord]:
        try:
            return repo.get_orders(user_id)
        except SQLAlchemyError as e:
            logger.error(f"[BARISTA] Error fetching order history: {e}")
            return []

    def _load_menu(self, repo: StoreRepository) -> List[MenuItemRecord]:
        try:
            return repo.get_menu()
        except SQLAlchemyError as e:
            logger.error(f"[BARISTA] Error fetching menu items: {e}")
            return []

    def load_customer(self, repo: StoreRepository, user_id: Optional[str]) -> CustomerContext:
        if not user_id:
            return CustomerContext()
        return CustomerContext(
            user_id=user_id,
            profile=self._load_profile(repo, user_id),
            orders=self._load_orders(repo, user_id),
        )

    def handle_query(self, request: BaristaRequest, repo: StoreRepository) -> BaristaResponse:
        Config.validate()
        if not request.message or not request.message.strip():
            raise BaristaRequestError("No message provided")

        message = request.message
        logger.info(f"[BARISTA] 1. Received message: '{mask_pii(message)}' userId: {request.user_id}")
        logger.info(f"[BARISTA]    active codes: {len(request.active_codes)}, "
                    f"history turns: {len(request.chat_history)}")

        customer = self.load_customer(repo, request.user_id)
        menu = self._load_menu(repo)
        logger.info(f"[BARISTA] 2. Loaded {len(customer.orders)} orders and {len(menu)} menu items")

        decision = self.discount_agent.decide(message, customer)

        messages = self.builder.build_messages(
            message, menu, customer, request.active_codes, request.chat_history, decision
        )
        logger.info("[BARISTA] 3. Prompt assembled, calling the chat completion API")

        reply = self.client_factory().generate_reply(messages)

        response = self.postprocessor.process_response(reply, decision, request.active_codes)
        logger.info(f"[BARISTA] 4. Done, discount surfaced: {response.discount_code is not None}")
        return response
