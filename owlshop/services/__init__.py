from owlshop.services.address import AddressService
from owlshop.services.customer import CustomerService
from owlshop.services.frontend import FrontendService
from owlshop.services.order import OrderService

__all__ = ["AddressService", "CustomerService", "FrontendService", "OrderService"]
