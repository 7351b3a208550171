"""Decide whether outgoing proxy traffic goes direct or through another proxy."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field

from mieru.log import exported as log


class ProxyProtocol(enum.IntEnum):
    UNKNOWN_PROXY_PROTOCOL = 0
    SOCKS5_PROXY_PROTOCOL = 1


class EgressAction(enum.IntEnum):
    PROXY = 0
    DIRECT = 1
    REJECT = 2


@dataclass
class EgressProxy:
    """An upstream proxy that egress traffic may be sent to."""

    name: str = ""
    protocol: ProxyProtocol = ProxyProtocol.UNKNOWN_PROXY_PROTOCOL
    host: str = ""
    port: int = 0


@dataclass
class EgressRule:
    """Matches destinations and names the action to take for them."""

    ip_ranges: list[str] = field(default_factory=list)
    domain_names: list[str] = field(default_factory=list)
    action: EgressAction = EgressAction.PROXY
    proxy_name: str = ""


@dataclass
class EgressConfig:
    proxies: list[EgressProxy] = field(default_factory=list)
    rules: list[EgressRule] = field(default_factory=list)


@dataclass(frozen=True)
class Input:
    """The protocol of a request and its raw bytes."""

    protocol: ProxyProtocol
    data: bytes = b""


@dataclass(frozen=True)
class Action:
    action: EgressAction
    proxy: EgressProxy | None = None


_DIRECT = Action(EgressAction.DIRECT)

_SOCKS5_VERSION = 0x05
_CMD_CONNECT = 0x01
_ATYP_IPV4 = 0x01
_ATYP_DOMAIN = 0x03
_ATYP_IPV6 = 0x04


class Controller(abc.ABC):
    @abc.abstractmethod
    def find_action(self, request: Input) -> Action:
        """Return the action to take for ``request``."""


class AlwaysDirectController(Controller):
    """Sends everything directly."""

    def find_action(self, request: Input) -> Action:
        return _DIRECT


class Socks5Controller(Controller):
    """Matches socks5 CONNECT requests against wildcard egress rules."""

    def __init__(self, config: EgressConfig | None = None) -> None:
        self.config = config if config is not None else EgressConfig()

    def find_action(self, request: Input) -> Action:
        if request.protocol != ProxyProtocol.SOCKS5_PROXY_PROTOCOL:
            log.debug("egress Socks5Controller: %s is not supported", request.protocol)
            return _DIRECT
        data = bytes(request.data)
        if len(data) < 4:
            log.debug("egress Socks5Controller: input %r is too short", data)
            return _DIRECT
        if data[0] != _SOCKS5_VERSION:
            log.debug("egress Socks5Controller: input %r is not socks5 protocol", data)
            return _DIRECT
        if data[1] != _CMD_CONNECT:
            return _DIRECT

        is_ip = data[3] in (_ATYP_IPV4, _ATYP_IPV6)
        is_domain = data[3] == _ATYP_DOMAIN
        for rule in self.config.rules:
            matches_ip = is_ip and rule.ip_ranges[:1] == ["*"]
            matches_domain = is_domain and rule.domain_names[:1] == ["*"]
            if not (matches_ip or matches_domain):
                continue
            for proxy in self.config.proxies:
                if proxy.name == rule.proxy_name:
                    return Action(rule.action, proxy)
        return _DIRECT