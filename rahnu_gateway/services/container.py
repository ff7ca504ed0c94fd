"""Per-request bundle of application services over one storage unit of work"""

from rahnu_gateway.domain.repositories import Storage
from rahnu_gateway.services.clients import ClientService, GoldItemService
from rahnu_gateway.services.common import Clock
from rahnu_gateway.services.documents import DocumentService
from rahnu_gateway.services.gold_prices import GoldPriceService
from rahnu_gateway.services.loans import LoanService
from rahnu_gateway.services.notifications import NotificationService
from rahnu_gateway.services.payments import PaymentService
from rahnu_gateway.services.users import UserService
from rahnu_gateway.utils.date_utils import utcnow


class Services:
    def __init__(self, storage: Storage, clock: Clock = utcnow):
        self.storage = storage
        self.users = UserService(storage, clock)
        self.clients = ClientService(storage, clock)
        self.gold_items = GoldItemService(storage, clock)
        self.loans = LoanService(storage, clock)
        self.payments = PaymentService(storage, clock)
        self.documents = DocumentService(storage, clock)
        self.notifications = NotificationService(storage, clock)
        self.gold_prices = GoldPriceService(storage, clock)
