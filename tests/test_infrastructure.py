"""
Infrastructure tests
基础设施测试
"""

import pytest
from impostor.core.config import settings


class TestInfrastructure:
    """Test basic infrastructure setup"""

    def test_app_creation(self):
        """Test that FastAPI app is created successfully"""
        from impostor.main import app
        assert app is not None
        assert app.title == "Impostor"
        assert app.version == "1.0.0"

    def test_settings_loaded(self):
        """Test that settings are loaded correctly"""
        assert settings is not None
        assert settings.ENVIRONMENT is not None
        assert settings.ROOM_TTL_SECONDS == 6 * 60 * 60
        assert settings.MIN_PLAYERS == 3
        assert len(settings.cors_origins_list) >= 1

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client):
        """Test health check endpoint"""
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["store"] == {"status": "healthy", "backend": "memory"}

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client):
        """Test root endpoint"""
        response = await client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "Impostor" in data["message"]
        assert data["status"] == "running"

    @pytest.mark.asyncio
    async def test_categories_endpoint(self, client):
        """Test categories are listed under both prefixes"""
        for path in ("/categories", "/api/categories"):
            response = await client.get(path)
            assert response.status_code == 200
            categories = response.json()["categories"]
            assert categories[0] == "General"
            assert "Animals" in categories

    @pytest.mark.asyncio
    async def test_process_time_header(self, client):
        response = await client.get("/health")
        assert "x-process-time" in response.headers
