"""Opt-in exposure of objects on the management server.

Objects compose a :class:`ManagementRegistration` rather than inheriting from a
common base. Every failure is logged at warning level and swallowed so the
owning object stays usable even when it could not be exposed.
"""

from __future__ import annotations

import logging

from procstats.lib.management import ManagedResource, ManagementError, ManagementServer, ObjectName

_log = logging.getLogger(__name__)


def sanitize(candidate: str | None) -> str:
    """Collapse whitespace runs into ``.`` separators (``" My Type "`` -> ``"My.Type"``)."""

    if not candidate:
        return ""
    return ".".join(candidate.split())


class ManagementRegistration:
    """Registration handle for one resource under ``domain:type=<type>,name=<name>``."""

    def __init__(
        self,
        server: ManagementServer | None,
        domain: str | None,
        type_name: str | None,
        name: str | None,
        resource: ManagedResource,
        logger: logging.Logger | None = None,
    ) -> None:
        self._server = server
        self._resource = resource
        self._log = logger or _log
        self.domain = sanitize(domain)
        self.type = sanitize(type_name)
        self.name = sanitize(name)
        self.object_name = f"{self.domain}:type={self.type},name={self.name}"

    def register(self) -> bool:
        """Register the resource; returns whether this call added it."""

        if self._server is None:
            return False
        try:
            object_name = ObjectName.parse(self.object_name)
            if self._server.is_registered(object_name):
                self._log.warning(
                    "Attempt made to register an already existing managed resource for '%s'",
                    object_name,
                )
                return False
            self._log.debug("Registering managed resource named %s", object_name)
            self._server.register(self._resource, object_name)
            return True
        except ManagementError as exc:
            self._log.warning("Error registering managed resource for '%s': %s", self.object_name, exc)
            return False

    def unregister(self) -> None:
        if self._server is None:
            return
        try:
            object_name = ObjectName.parse(self.object_name)
            if not self._server.is_registered(object_name):
                return
            if self._server.get(object_name) is not self._resource:
                # the name belongs to whichever resource registered it first
                self._log.debug("Managed resource %s is owned by another object", object_name)
                return
            self._log.debug("Unregistering managed resource named %s", object_name)
            self._server.unregister(object_name)
        except ManagementError as exc:
            self._log.warning("Error unregistering managed resource for '%s': %s", self.object_name, exc)

    def is_registered(self) -> bool:
        if self._server is None:
            return False
        try:
            return self._server.is_registered(self.object_name)
        except ManagementError as exc:
            self._log.warning("Error testing registration for '%s': %s", self.object_name, exc)
            return False
