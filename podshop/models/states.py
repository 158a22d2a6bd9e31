import enum


class DesignStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    REJECTED = "REJECTED"


class DesignEvent(str, enum.Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    RESUBMIT = "resubmit"


class ProductStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"


class ProductEvent(str, enum.Enum):
    SUBMIT = "submit"
    RESUBMIT = "resubmit"
    APPROVE_PUBLISH = "approve_publish"
    APPROVE_DRAFT = "approve_draft"
    REJECT = "reject"
    PUBLISH = "publish"
    CASCADE_PUBLISH = "cascade_publish"
    CASCADE_DRAFT = "cascade_draft"


class PostValidationAction(str, enum.Enum):
    AUTO_PUBLISH = "AUTO_PUBLISH"
    TO_DRAFT = "TO_DRAFT"


class Decision(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class Lifecycle(str, enum.Enum):
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class DesignCategory(str, enum.Enum):
    LOGO = "LOGO"
    PATTERN = "PATTERN"
    ILLUSTRATION = "ILLUSTRATION"
    TYPOGRAPHY = "TYPOGRAPHY"
    ABSTRACT = "ABSTRACT"
