"""
Domain Exceptions.

Custom exceptions for domain-level errors.
These exceptions represent business rule violations that must reach the caller.
"""

from typing import Optional, Any, Dict, Iterable, List


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DOMAIN_ERROR"
        self.details = details or {}


class ValidationException(DomainException):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, "value": str(value) if value is not None else None}
        )


class CircularReferenceException(DomainException):
    """Raised when a circular reference is detected in the component graph."""

    def __init__(self, product_ids: Iterable[str]):
        self.product_ids: List[str] = [str(pid) for pid in product_ids]
        super().__init__(
            message="Circular reference detected: a product cannot use itself as a component",
            code="CIRCULAR_REFERENCE",
            details={"product_ids": self.product_ids}
        )


class DanglingComponentException(DomainException):
    """Raised by strict cost resolution when a component points to a missing product."""

    def __init__(self, product_id: str, component_id: str):
        super().__init__(
            message=f"Product '{product_id}' references missing component '{component_id}'",
            code="DANGLING_COMPONENT",
            details={"product_id": product_id, "component_id": component_id}
        )


class BusinessRuleViolationException(DomainException):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            code="BUSINESS_RULE_VIOLATION",
            details={"rule": rule, **(details or {})}
        )


class ComponentInUseException(BusinessRuleViolationException):
    """Raised when deleting a product that other products use as a component."""

    def __init__(self, product_id: str, used_in: Iterable[str]):
        self.used_in: List[str] = list(used_in)
        super().__init__(
            "COMPONENT_IN_USE",
            "This product is used as a component of other products and cannot be deleted",
            details={"product_id": product_id, "used_in": self.used_in}
        )


class SideEffectException(DomainException):
    """
    Raised when ledger effects of a project change could not all be applied.

    The project change itself stays applied. ``pending_effects`` holds the
    failed effect followed by the ones that were never attempted, so the
    caller can retry them.
    """

    def __init__(self, project_id: str, pending_effects: list, cause: Exception):
        self.project_id = project_id
        self.pending_effects = list(pending_effects)
        self.cause = cause
        super().__init__(
            message=f"Ledger effects for project '{project_id}' failed: {cause}",
            code="SIDE_EFFECT_FAILED",
            details={
                "project_id": project_id,
                "pending": len(self.pending_effects),
            }
        )
