from podshop.models.design import Design
from podshop.models.vendor_product import VendorProduct
from podshop.models.position import DesignPosition
from podshop.models.audit_log import AuditLog
from podshop.models.notification import Notification

__all__ = [
    "Design",
    "VendorProduct",
    "DesignPosition",
    "AuditLog",
    "Notification",
]
