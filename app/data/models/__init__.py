#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.inventory import InventoryModel
from app.data.models.payment import PaymentModel
from app.data.models.review import ReviewModel
from app.data.models.shipping import StaffModel, ShippingLogModel

__all__ = ["InventoryModel", "PaymentModel", "ReviewModel", "StaffModel", "ShippingLogModel"]
