from enum import Enum


class ResourceCategory(str, Enum):
    FORMULAS = "formulas"
    QUOTES = "quotes"
    KNOWLEDGE = "knowledge"
    OTHER = "other"


class ApprovalStatus(str, Enum):
    APPROVED = "Approved"
    PENDING = "Pending"
    REJECTED = "Rejected"


class EntityType(str, Enum):
    FORMULA = "Formula"
    QUOTE = "Quote"
    RESOURCE = "Resource"


class Decision(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    RETURNED = "Returned"  # legal stored value, no workflow produces it


class FormulaStatus(str, Enum):
    DRAFT = "Draft"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class QuoteStatus(str, Enum):
    DRAFT = "Draft"
    PENDING_APPROVAL = "Pending_Approval"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
