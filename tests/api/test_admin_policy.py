"""Tests for settings parsing and the admin policy."""

from snippetbox.api.auth import AdminPolicy
from snippetbox.config import Settings


class TestSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SNIPPETBOX_STORE_BACKEND", "redis")
        monkeypatch.setenv("SNIPPETBOX_ADMIN_EMAILS", "Root@Example.com, ops@example.com")
        settings = Settings()
        assert settings.store_backend == "redis"
        assert settings.admin_email_list == ["root@example.com", "ops@example.com"]

    def test_domain_list_prefixed(self):
        settings = Settings(admin_email_domains="staff.example.com,@corp.example.com")
        assert settings.admin_domain_list == ["@staff.example.com", "@corp.example.com"]

    def test_cors_default(self):
        assert Settings(cors_origins="").cors_origin_list == ["*"]


class TestAdminPolicy:
    def test_explicit_email(self):
        policy = AdminPolicy(emails=["root@example.com"], domains=[])
        assert policy.is_admin("ROOT@example.com")
        assert not policy.is_admin("ann@example.com")

    def test_domain_suffix(self):
        policy = AdminPolicy(emails=[], domains=["@staff.example.com"])
        assert policy.is_admin("lead@staff.example.com")
        assert not policy.is_admin("lead@staff.example.com.evil")

    def test_anonymous_never_admin(self):
        policy = AdminPolicy(emails=[""], domains=["@example.com"])
        context = policy.context_for("   ")
        assert context.identity is None
        assert not context.is_admin

    def test_context_for_identity(self):
        policy = AdminPolicy.from_settings(Settings(admin_emails="root@example.com"))
        context = policy.context_for(" root@example.com ")
        assert context.identity == "root@example.com"
        assert context.is_admin
