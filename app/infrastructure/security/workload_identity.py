"""Workload identity derived from Kubernetes service-account tokens.

A projected service-account token carries the caller's namespace and service
account either in `sub` (`system:serviceaccount:<namespace>:<name>`) or in
the `kubernetes.io` claim.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

SERVICE_ACCOUNT_PREFIX = "system:serviceaccount:"


class InvalidWorkloadIdentity(ValueError):
    """Raised when token claims do not describe a service account."""


@dataclass(frozen=True)
class WorkloadIdentity:
    """Authenticated caller."""

    subject: str
    namespace: Optional[str] = None
    service_account: Optional[str] = None
    is_admin: bool = False

    @classmethod
    def from_claims(
        cls, claims: Dict[str, Any], admin_subjects: Iterable[str] = ()
    ) -> "WorkloadIdentity":
        """Build an identity from verified token claims.

        Raises:
            InvalidWorkloadIdentity: when no subject can be found
        """
        subject = claims.get("sub")
        namespace = service_account = None

        if isinstance(subject, str) and subject.startswith(SERVICE_ACCOUNT_PREFIX):
            parts = subject[len(SERVICE_ACCOUNT_PREFIX):].split(":")
            if len(parts) == 2 and all(parts):
                namespace, service_account = parts

        k8s = claims.get("kubernetes.io")
        if (namespace is None or service_account is None) and isinstance(k8s, dict):
            sa = k8s.get("serviceaccount") or {}
            namespace = k8s.get("namespace") or namespace
            service_account = sa.get("name") or service_account
            if not subject and namespace and service_account:
                subject = (
                    f"{SERVICE_ACCOUNT_PREFIX}{namespace}:{service_account}"
                )

        if not subject or not isinstance(subject, str):
            raise InvalidWorkloadIdentity("Token has no subject")

        return cls(
            subject=subject,
            namespace=namespace,
            service_account=service_account,
            is_admin=subject in set(admin_subjects),
        )

    def matches(self, binding: str) -> bool:
        """True if a `namespace:serviceaccount` binding (with `*`) matches."""
        if self.namespace is None or self.service_account is None:
            return False
        ns, _, sa = binding.partition(":")
        if not sa:
            return False
        return ns in ("*", self.namespace) and sa in ("*", self.service_account)
