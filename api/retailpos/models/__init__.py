from retailpos.models.branch import Branch
from retailpos.models.cash import CashMovement
from retailpos.models.customer import Customer, CustomerPayment
from retailpos.models.personnel import Personnel, PersonnelTransaction
from retailpos.models.product import Product
from retailpos.models.sale import Sale, SaleItem
from retailpos.models.turkcell import TurkcellTarget, TurkcellTransaction
from retailpos.models.user import User

__all__ = [
    "Branch",
    "CashMovement",
    "Customer",
    "CustomerPayment",
    "Personnel",
    "PersonnelTransaction",
    "Product",
    "Sale",
    "SaleItem",
    "TurkcellTarget",
    "TurkcellTransaction",
    "User",
]
