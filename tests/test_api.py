from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from productlobby_insights.api import app, get_db_session
from productlobby_insights.auth import extract_session_token
from productlobby_insights.models.db import LobbyIntensity, utcnow
from productlobby_insights.services.engagement import EngagementService
from tests.conftest import NOW


@pytest.fixture
def client(session):
    def override():
        yield session

    app.dependency_overrides[get_db_session] = override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner(build):
    creator = build.user(name="Olive Owner")
    build.login(creator, token="owner-token")
    return creator


@pytest.fixture
def campaign(build, owner):
    return build.campaign(owner, slug="silent-kettle")


def auth(token="owner-token"):
    return {"Authorization": f"Bearer {token}"}


class TestEngagementScoreEndpoint:
    def test_requires_session(self, client, campaign):
        response = client.get(f"/api/campaigns/{campaign.id}/engagement-score")
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}

    def test_expired_session(self, client, build, owner, campaign):
        build.login(owner, token="stale", expires_at=utcnow() - timedelta(minutes=1))
        response = client.get(f"/api/campaigns/{campaign.id}/engagement-score", headers=auth("stale"))
        assert response.status_code == 401

    def test_unknown_campaign(self, client, owner):
        response = client.get("/api/campaigns/nope/engagement-score", headers=auth())
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Campaign not found"}

    def test_only_creator_may_read(self, client, build, campaign):
        intruder = build.user()
        build.login(intruder, token="intruder-token")
        response = client.get(f"/api/campaigns/{campaign.id}/engagement-score", headers=auth("intruder-token"))
        assert response.status_code == 403
        assert response.json() == {"success": False, "error": "Forbidden"}

    def test_empty_campaign(self, client, campaign):
        response = client.get("/api/campaigns/silent-kettle/engagement-score", headers=auth())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["totalSupporters"] == 0
        assert data["topSupporters"] == []
        assert data["averageEngagementScore"] == 0
        assert data["distribution"] == {
            "highEngagement": {"count": 0, "percentage": 0},
            "moderateEngagement": {"count": 0, "percentage": 0},
            "lowEngagement": {"count": 0, "percentage": 0},
        }

    def test_report_shape(self, client, build, campaign):
        fan = build.user(name="Fay Fan", handle=None, avatar="https://img.example.com/fay.png")
        build.every_activity(campaign, fan, at=NOW)

        response = client.get(f"/api/campaigns/{campaign.id}/engagement-score", headers=auth())

        data = response.json()["data"]
        assert data["totalSupporters"] == 1
        assert data["distribution"]["highEngagement"] == {"count": 1, "percentage": 100}
        assert data["topSupporters"] == [{
            "id": fan.id,
            "name": "Fay Fan",
            "handle": "anonymous",
            "avatar": "https://img.example.com/fay.png",
            "engagementScore": 8.8,
            "lastActive": "2026-03-10T12:00:00.000Z",
            "activityTypes": [
                "Lobby", "Pledge", "Poll Vote", "Comment", "Share", "Bookmark", "Reaction", "Follow"
            ],
        }]
        assert data["averageEngagementScore"] == 8.8
        assert "platformAverageScore" in data

    def test_session_cookie(self, client, campaign):
        client.cookies.set("session_token", "owner-token")
        response = client.get(f"/api/campaigns/{campaign.id}/engagement-score")
        assert response.status_code == 200

    def test_unexpected_error_is_hidden(self, client, campaign, monkeypatch):
        def boom(self, campaign_id):
            raise RuntimeError("connection pool exhausted at db-3.internal")

        monkeypatch.setattr(EngagementService, "build_report", boom)
        response = client.get(f"/api/campaigns/{campaign.id}/engagement-score", headers=auth())

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}


class TestPricingAnalysisEndpoint:
    def test_no_responses(self, client, campaign):
        response = client.get(f"/api/campaigns/{campaign.id}/pricing-analysis", headers=auth())

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalResponses"] == 0
        assert data["demandCurve"] == []
        assert data["priceRange"] == {"min": 0, "max": 0}
        assert len(data["distribution"]) == 6
        assert data["byIntensity"]["takeMyMoney"] == {"avg": 0, "count": 0}

    def test_analysis_shape(self, client, build, campaign):
        keen, casual = build.user(), build.user()
        build.lobby(campaign, keen, intensity=LobbyIntensity.TAKE_MY_MONEY)
        build.pledge(campaign, keen, price=60)
        build.pledge(campaign, casual, price=20)

        data = client.get(f"/api/campaigns/{campaign.id}/pricing-analysis", headers=auth()).json()["data"]

        assert data["totalResponses"] == 2
        assert data["averagePrice"] == 40
        assert data["medianPrice"] == 40
        assert data["priceRange"] == {"min": 20, "max": 60}
        assert data["suggestedPricePoints"] == {"economy": 20, "standard": 60, "premium": 60}
        assert data["byIntensity"]["takeMyMoney"] == {"avg": 60, "count": 1}
        assert data["byIntensity"]["neatIdea"] == {"avg": 20, "count": 1}
        assert data["demandCurve"] == [
            {"price": 20, "estimatedBuyers": 2},
            {"price": 60, "estimatedBuyers": 1},
        ]
        assert data["optimalPrice"] == 60
        assert data["maxRevenue"] == 60

    def test_unknown_campaign(self, client, owner):
        response = client.get("/api/campaigns/nope/pricing-analysis", headers=auth())
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Campaign not found"}

    def test_requires_session(self, client, campaign):
        response = client.get(f"/api/campaigns/{campaign.id}/pricing-analysis")
        assert response.status_code == 401

    def test_only_creator_may_read(self, client, build, campaign):
        intruder = build.user()
        build.login(intruder, token="intruder-token")
        response = client.get(f"/api/campaigns/{campaign.id}/pricing-analysis", headers=auth("intruder-token"))
        assert response.status_code == 403


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestSessionToken:
    def test_cookie_wins(self):
        assert extract_session_token({"session_token": "c"}, "Bearer h") == "c"

    def test_bearer_header(self):
        assert extract_session_token({}, "Bearer  abc ") == "abc"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer   "])
    def test_missing_or_malformed(self, header):
        assert extract_session_token({}, header) is None
