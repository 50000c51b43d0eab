"""
Tests for environment-driven settings
"""

from efiling.core.config import Settings


class TestListSettingsFromEnvironment:
    def test_comma_separated_values(self, monkeypatch):
        monkeypatch.setenv("GLOBAL_ROLE_CODES", "ceo, COO,DG")
        monkeypatch.setenv("ADMIN_ROLE_IDS", "1, 2,7")
        monkeypatch.setenv("CORS_ORIGINS", "https://efiling.kwsc.gov.pk, http://localhost:3000")

        settings = Settings()

        assert settings.GLOBAL_ROLE_CODES == ["CEO", "COO", "DG"]
        assert settings.ADMIN_ROLE_IDS == [1, 2, 7]
        assert settings.CORS_ORIGINS == ["https://efiling.kwsc.gov.pk", "http://localhost:3000"]

    def test_single_value(self, monkeypatch):
        monkeypatch.setenv("GLOBAL_ROLE_CODES", "md")
        monkeypatch.setenv("ADMIN_ROLE_IDS", "1")

        settings = Settings()

        assert settings.GLOBAL_ROLE_CODES == ["MD"]
        assert settings.ADMIN_ROLE_IDS == [1]

    def test_defaults_without_environment(self, monkeypatch):
        for name in ("GLOBAL_ROLE_CODES", "ADMIN_ROLE_IDS", "CORS_ORIGINS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.GLOBAL_ROLE_CODES == ["CEO", "COO"]
        assert settings.ADMIN_ROLE_IDS == [1, 2]
