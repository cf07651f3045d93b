"""
Access plugin registry.

Allows registering audit sinks and named action policies without modifying
core code. Implementations register themselves using decorators.

Usage:
    @AuthRegistry.audit_sink("kafka")
    class KafkaAuditSink(AuditSink):
        ...

    @AuthRegistry.policy("billing.refund")
    def can_refund(data: PolicyInput) -> bool:
        ...

    # Later, get by name:
    sink = AuthRegistry.get_audit_sink("kafka", topic="access")
"""

from typing import Any, Awaitable, Callable, Type, TypeVar

from .interfaces import AuditSink

PolicyFn = Callable[[Any], bool | Awaitable[bool]]
P = TypeVar("P", bound=PolicyFn)


class AuthRegistry:
    """
    Central registry for access components.

    Components register themselves using decorators.
    This enables extensibility without modifying factory code.
    """

    _audit_sinks: dict[str, Type[AuditSink]] = {}
    _policies: dict[str, PolicyFn] = {}

    # ============================================================
    # REGISTRATION DECORATORS
    # ============================================================

    @classmethod
    def audit_sink(cls, name: str) -> Callable[[Type[AuditSink]], Type[AuditSink]]:
        """
        Decorator to register an audit sink.

        Usage:
            @AuthRegistry.audit_sink("console")
            class ConsoleAuditSink(AuditSink):
                ...
        """
        def decorator(sink_class: Type[AuditSink]) -> Type[AuditSink]:
            cls._audit_sinks[name] = sink_class
            return sink_class
        return decorator

    @classmethod
    def policy(cls, action: str) -> Callable[[P], P]:
        """
        Decorator to register a named action policy.

        Usage:
            @AuthRegistry.policy("plugin.install")
            def can_install_plugin(data: PolicyInput) -> bool:
                ...
        """
        def decorator(rule: P) -> P:
            cls._policies[action] = rule
            return rule
        return decorator

    @classmethod
    def register_policy(cls, action: str, rule: PolicyFn) -> None:
        """Register a policy built at runtime (e.g. from a factory)."""
        cls._policies[action] = rule

    # ============================================================
    # GETTERS
    # ============================================================

    @classmethod
    def get_audit_sink(cls, name: str, **kwargs: Any) -> AuditSink:
        """
        Get an audit sink by name.

        Args:
            name: Registered name of the sink
            **kwargs: Arguments to pass to sink constructor

        Raises:
            ValueError: If sink not found
        """
        sink_class = cls._audit_sinks.get(name)
        if not sink_class:
            available = list(cls._audit_sinks.keys())
            raise ValueError(
                f"Unknown audit sink: '{name}'. "
                f"Available: {available}"
            )
        return sink_class(**kwargs)

    @classmethod
    def get_policy(cls, action: str) -> PolicyFn:
        """
        Get a named policy.

        Raises:
            ValueError: If no policy is registered for the action
        """
        rule = cls._policies.get(action)
        if not rule:
            available = list(cls._policies.keys())
            raise ValueError(
                f"Unknown policy: '{action}'. "
                f"Available: {available}"
            )
        return rule

    # ============================================================
    # INTROSPECTION
    # ============================================================

    @classmethod
    def list_audit_sinks(cls) -> list[str]:
        """List all registered audit sink names."""
        return list(cls._audit_sinks.keys())

    @classmethod
    def list_policies(cls) -> list[str]:
        """List all registered policy actions."""
        return list(cls._policies.keys())

    @classmethod
    def has_audit_sink(cls, name: str) -> bool:
        """Check if an audit sink is registered."""
        return name in cls._audit_sinks

    @classmethod
    def has_policy(cls, action: str) -> bool:
        """Check if a policy is registered for an action."""
        return action in cls._policies
