"""
Tests for role-derived rules, ABAC rules and the combined rule set.
"""

import pytest

from zopio_access import evaluate_access
from zopio_access.core.auth import Action, EvaluationResult, MemoryAuditSink, Rule, UserContext, evaluate
from zopio_access.extensions.auth import runner
from zopio_access.extensions.auth.abac import abac_rules, same_organization_operations
from zopio_access.extensions.auth.rbac import (
    SUBJECTS,
    PermissionTemplate,
    RoleDefinition,
    rbac_rules,
    register_role,
    rules_for_role,
)
from zopio_access.extensions.auth.rbac import roles as roles_module


@pytest.fixture
def fresh_runner(monkeypatch):
    """Run the default evaluator with a memory sink and clean caches."""
    monkeypatch.setenv("ACCESS_AUDIT_SINK", "memory")
    from zopio_access.core.config import get_settings

    get_settings.cache_clear()
    runner.combined_rules.cache_clear()
    runner.get_access_evaluator.cache_clear()
    yield runner.get_access_evaluator()
    get_settings.cache_clear()
    runner.get_access_evaluator.cache_clear()


@pytest.fixture
def restore_roles():
    """Undo register_role() calls made by a test."""
    saved = dict(roles_module._role_definitions)
    yield
    roles_module._role_definitions.clear()
    roles_module._role_definitions.update(saved)


# ============ RBAC Rules ============


def test_role_rules_are_gated_on_role():
    rules = rules_for_role("user")
    update = next(r for r in rules if r.key == "Profile:update")

    assert update.dsl == {"$and": [{"$user": {"role": "user"}}, {"userId": "${user.id}"}]}
    assert update.description == "role:user"


def test_role_rules_skip_cannot_templates():
    assert all(not r.inverted for r in rbac_rules())
    assert not any(r.key == "Profile:delete" for r in rules_for_role("user"))


def test_manage_all_expanded():
    keys = {r.key for r in rules_for_role("admin")}

    assert len(keys) == len(SUBJECTS) * len(Action)
    assert "Plugin:delete" in keys
    assert "all:manage" in keys


def test_unknown_role_has_no_rules():
    assert rules_for_role("nonexistent") == []


def test_template_user_clause_keeps_role_gate(restore_roles):
    """A template's own $user clause cannot replace the role gate."""
    register_role(
        RoleDefinition(
            "finance",
            (PermissionTemplate("read", "Report", conditions={"$user": {"department": "finance"}}),),
        )
    )
    rules = rules_for_role("finance")
    guest = UserContext(id="9", role="guest", attributes={"department": "finance"})
    analyst = UserContext(id="10", role="finance", attributes={"department": "finance"})

    assert evaluate(rules, guest, "read", "Report").reason == "No matching rule found"
    assert evaluate(rules, analyst, "read", "Report").can


def test_other_roles_do_not_match():
    ctx = UserContext(id="42", role="guest")

    result = evaluate(rbac_rules(), ctx, "read", "Dashboard")

    assert result.reason == "No matching rule found"


# ============ Combination ============


def test_combine_keeps_order():
    rbac = [Rule("Dashboard", "read")]
    abac = [Rule("Dashboard", "read", dsl={"organizationId": "x"})]

    assert runner.combine(rbac, abac) == (rbac[0], abac[0])


def test_rbac_precedes_abac():
    """An RBAC grant wins over a later ABAC rule for the same pair."""
    rbac = [Rule("Dashboard", "read")]
    abac = [Rule("Dashboard", "read", field_permissions={"revenue": "none"})]
    combined = runner.combine(rbac, abac)

    result = evaluate(combined, UserContext(id="1"), "read", "Dashboard", field="revenue")

    assert result == EvaluationResult(can=True)


def test_combined_rules_cached():
    runner.combined_rules.cache_clear()
    first = runner.combined_rules()

    assert runner.combined_rules() is first
    assert first[: len(rbac_rules())] == tuple(rbac_rules())
    assert first[len(rbac_rules()):] == abac_rules


# ============ End to End ============


def test_own_profile_update_end_to_end(fresh_runner):
    ctx = UserContext(id="42", role="user")

    allowed = evaluate_access(ctx, "update", "Profile", record={"userId": "42"})
    denied = evaluate_access(ctx, "update", "Profile", record={"userId": "99"})

    assert allowed == EvaluationResult(can=True)
    assert denied == EvaluationResult(can=False, reason="No matching rule found")


def test_evaluate_access_audits_each_call(fresh_runner):
    assert isinstance(fresh_runner.sink, MemoryAuditSink)

    evaluate_access(UserContext(id="42", role="user"), "read", "Dashboard")

    assert fresh_runner.sink.last.can is True
    assert fresh_runner.sink.last.resource == "Dashboard"


def test_ssn_hidden_for_users_not_admins(fresh_runner):
    user = UserContext(id="42", role="user")
    admin = UserContext(id="1", role="admin")

    assert evaluate_access(user, "read", "Profile", field="ssn").reason == "No access to field 'ssn'"
    assert evaluate_access(admin, "read", "Profile", field="ssn").can


def test_abac_grants_organization_read(fresh_runner):
    ctx = UserContext(id="42", role="guest", organization_id="org_1")

    assert evaluate_access(ctx, "read", "Organization", record={"id": "org_1"}).can
    assert not evaluate_access(ctx, "read", "Organization", record={"id": "org_2"}).can


def test_abac_attribute_rules(fresh_runner):
    pro = UserContext(id="42", role="guest", attributes={"plan": "pro"})
    free = UserContext(id="43", role="guest", attributes={"plan": "free"})

    assert evaluate_access(pro, "read", "FeatureFlag").can
    assert not evaluate_access(free, "read", "FeatureFlag").can


def test_abac_dashboard_hides_revenue(fresh_runner):
    ctx = UserContext(id="42", role="guest", organization_id="org_1")
    record = {"organizationId": "org_1"}

    assert evaluate_access(ctx, "read", "Dashboard", record, field="metrics").can
    assert not evaluate_access(ctx, "read", "Dashboard", record, field="revenue").can


def test_same_organization_operations():
    ops = UserContext(id="1", organization_id="org_1", attributes={"department": "operations"})
    sales = UserContext(id="2", organization_id="org_1", attributes={"department": "sales"})

    assert same_organization_operations(ops, {"id": "org_1"})
    assert not same_organization_operations(ops, {"id": "org_2"})
    assert not same_organization_operations(ops)
    assert not same_organization_operations(sales, {"id": "org_1"})
