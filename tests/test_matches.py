"""Match API Tests

Scheduling, date changes, availability answers and calendar import.
"""

import pytest

from tests.factories import TODAY, days_from


async def create_match(test_client, team, headers, **overrides) -> dict:
    payload = {"opponent": "SV Gegner", "date": days_from(TODAY, 1), "time": "15:00"}
    payload.update(overrides)
    response = await test_client.post(f"/teams/{team['slug']}/matches", json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestMatchScheduling:
    """Test creating and listing matches"""

    @pytest.mark.asyncio
    async def test_create_match(self, test_client, team, team_headers):
        match = await create_match(test_client, team, team_headers, date="11.03.2025", venue="Sportpark")

        assert match["date"] == "2025-03-11"
        assert match["display_date"] == "11.03.2025"
        assert match["venue"] == "Sportpark"
        assert match["is_home"] is True
        assert match["status"] == "not_ready"
        assert match["summary"] == {
            "available": 0, "not_available": 0, "maybe": 0, "no_response": 5, "total": 5
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"opponent": "A", "date": "next friday"},
        {"opponent": "A", "date": "31.02.2025"},
        {"opponent": "", "date": "2025-03-11"},
        {"opponent": "A", "date": "2025-03-11", "time": "3pm"},
    ])
    async def test_invalid_match(self, test_client, team, team_headers, payload):
        response = await test_client.post(f"/teams/{team['slug']}/matches", json=payload, headers=team_headers)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_matches_sorted_with_status(self, test_client, team, team_headers):
        await create_match(test_client, team, team_headers, opponent="Later", date="01.06.2025")
        await create_match(test_client, team, team_headers, opponent="Past", date="01.03.2025")
        await create_match(test_client, team, team_headers, opponent="Soon", date="12.03.2025")

        response = await test_client.get(f"/teams/{team['slug']}/matches", headers=team_headers)

        assert response.status_code == 200
        matches = response.json()
        assert [m["opponent"] for m in matches] == ["Past", "Soon", "Later"]
        assert [m["status"] for m in matches] == ["past", "not_ready", "possible"]

    @pytest.mark.asyncio
    async def test_list_upcoming_only(self, test_client, team, team_headers):
        await create_match(test_client, team, team_headers, opponent="Past", date="01.03.2025")
        await create_match(test_client, team, team_headers, opponent="Soon", date="12.03.2025")

        response = await test_client.get(
            f"/teams/{team['slug']}/matches",
            params={"include_past": False},
            headers=team_headers
        )

        assert [m["opponent"] for m in response.json()] == ["Soon"]

    @pytest.mark.asyncio
    async def test_get_unknown_match(self, test_client, team, team_headers):
        response = await test_client.get(f"/teams/{team['slug']}/matches/nope", headers=team_headers)

        assert response.status_code == 404


class TestDateChange:
    """Test editing a match"""

    @pytest.mark.asyncio
    async def test_change_date_keeps_original(self, test_client, team, team_headers):
        match = await create_match(test_client, team, team_headers, date="2025-03-15")

        response = await test_client.patch(
            f"/teams/{team['slug']}/matches/{match['id']}",
            json={"date": "16.03.2025"},
            headers=team_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2025-03-16"
        assert data["original_date"] == "2025-03-15"
        assert data["display_original_date"] == "15.03.2025"

    @pytest.mark.asyncio
    async def test_change_venue_only(self, test_client, team, team_headers):
        match = await create_match(test_client, team, team_headers, date="2025-03-15")

        response = await test_client.patch(
            f"/teams/{team['slug']}/matches/{match['id']}",
            json={"venue": "Halle Süd"},
            headers=team_headers
        )

        assert response.status_code == 200
        assert response.json()["venue"] == "Halle Süd"
        assert response.json()["original_date"] is None

    @pytest.mark.asyncio
    async def test_change_to_invalid_date(self, test_client, team, team_headers):
        match = await create_match(test_client, team, team_headers)

        response = await test_client.patch(
            f"/teams/{team['slug']}/matches/{match['id']}",
            json={"date": "someday"},
            headers=team_headers
        )

        assert response.status_code == 422


class TestAvailability:
    """Test availability answers and the resulting status"""

    async def answer(self, test_client, team, headers, match_id, member_id, value):
        return await test_client.put(
            f"/teams/{team['slug']}/matches/{match_id}/availability/{member_id}",
            json={"availability": value},
            headers=headers
        )

    @pytest.mark.asyncio
    async def test_three_available_is_ready(self, test_client, team, team_headers, members):
        match = await create_match(test_client, team, team_headers)

        for member in members[:3]:
            response = await self.answer(test_client, team, team_headers, match["id"], member["id"], "available")
            assert response.status_code == 200

        assert response.json()["status"] == "ready"
        assert response.json()["summary"]["no_response"] == 2

    @pytest.mark.asyncio
    async def test_one_available_one_maybe_tomorrow(self, test_client, team, team_headers, members):
        match = await create_match(test_client, team, team_headers)

        await self.answer(test_client, team, team_headers, match["id"], members[0]["id"], "available")
        response = await self.answer(test_client, team, team_headers, match["id"], members[1]["id"], "maybe")

        assert response.json()["status"] == "not_ready"

    @pytest.mark.asyncio
    async def test_one_available_one_maybe_far_out(self, test_client, team, team_headers, members):
        match = await create_match(test_client, team, team_headers, date=days_from(TODAY, 92))

        await self.answer(test_client, team, team_headers, match["id"], members[0]["id"], "available")
        response = await self.answer(test_client, team, team_headers, match["id"], members[1]["id"], "maybe")

        assert response.json()["status"] == "possible"

    @pytest.mark.asyncio
    async def test_answer_replaces_previous(self, test_client, team, team_headers, members):
        match = await create_match(test_client, team, team_headers)

        await self.answer(test_client, team, team_headers, match["id"], members[0]["id"], "available")
        response = await self.answer(test_client, team, team_headers, match["id"], members[0]["id"], "not_available")

        summary = response.json()["summary"]
        assert summary["available"] == 0
        assert summary["not_available"] == 1

    @pytest.mark.asyncio
    async def test_responses_per_member(self, test_client, team, team_headers, members):
        match = await create_match(test_client, team, team_headers)
        await self.answer(test_client, team, team_headers, match["id"], members[1]["id"], "maybe")

        response = await test_client.get(f"/teams/{team['slug']}/matches/{match['id']}", headers=team_headers)

        responses = response.json()["responses"]
        assert [r["name"] for r in responses] == ["Anna", "Ben", "Clara", "David", "Eva"]
        assert [r["availability"] for r in responses] == [None, "maybe", None, None, None]

    @pytest.mark.asyncio
    async def test_unknown_value(self, test_client, team, team_headers, members):
        match = await create_match(test_client, team, team_headers)

        response = await self.answer(test_client, team, team_headers, match["id"], members[0]["id"], "perhaps")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_member(self, test_client, team, team_headers):
        match = await create_match(test_client, team, team_headers)

        response = await self.answer(test_client, team, team_headers, match["id"], "ghost", "available")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_member_of_other_team(self, test_client, team, team_headers, store):
        other = store.create_team("Other", "Zoe", [], 1)
        zoe = store.list_members(other["id"])[0]
        match = await create_match(test_client, team, team_headers)

        response = await self.answer(test_client, team, team_headers, match["id"], zoe["id"], "available")

        assert response.status_code == 404


ICS = "\n".join([
    "BEGIN:VCALENDAR",
    "BEGIN:VEVENT",
    "DTSTART:20250405T150000",
    "SUMMARY:FC Test - SV Gegner",
    "LOCATION:Sportplatz",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "DTSTART;VALUE=DATE:20250412",
    "SUMMARY:TSV Nachbar : FC Test",
    "END:VEVENT",
    "END:VCALENDAR",
])


class TestCalendarImport:
    """Test importing matches from an .ics export"""

    @pytest.mark.asyncio
    async def test_dry_run_creates_nothing(self, test_client, team, team_headers, store):
        response = await test_client.post(
            f"/teams/{team['slug']}/matches/import",
            json={"ics": ICS, "dry_run": True},
            headers=team_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert [c["opponent"] for c in data["candidates"]] == ["SV Gegner", "TSV Nachbar"]
        assert [c["is_home"] for c in data["candidates"]] == [True, False]
        assert data["imported"] == []
        assert store.list_matches(team["id"]) == []

    @pytest.mark.asyncio
    async def test_import_skips_existing(self, test_client, team, team_headers, store):
        await create_match(test_client, team, team_headers, opponent="SV Gegner", date="05.04.2025")

        response = await test_client.post(
            f"/teams/{team['slug']}/matches/import",
            json={"ics": ICS},
            headers=team_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["skipped"] == 1
        assert [m["opponent"] for m in data["imported"]] == ["TSV Nachbar"]
        assert len(store.list_matches(team["id"])) == 2

    @pytest.mark.asyncio
    async def test_empty_calendar_rejected(self, test_client, team, team_headers):
        response = await test_client.post(
            f"/teams/{team['slug']}/matches/import",
            json={"ics": ""},
            headers=team_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_garbage_calendar_rejected(self, test_client, team, team_headers, store):
        response = await test_client.post(
            f"/teams/{team['slug']}/matches/import",
            json={"ics": "definitely not a calendar"},
            headers=team_headers
        )

        assert response.status_code == 422
        assert store.list_matches(team["id"]) == []
