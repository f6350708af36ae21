"""
Tests for student ratings of lecturers
"""
import pytest
from httpx import AsyncClient


@pytest.fixture
def rating_data(lecturer, course):
    def _rating_data(**overrides):
        payload = {
            "lecturer_id": lecturer.id,
            "course_id": course.id,
            "rating": 4,
            "rating_type": "teaching",
            "comment": "Clear explanations",
        }
        payload.update(overrides)
        return payload

    return _rating_data


class TestCreateRating:

    async def test_create_rating(self, client: AsyncClient, student_headers, rating_data):
        response = await client.post("/api/v1/ratings", json=rating_data(), headers=student_headers)

        assert response.status_code == 201
        assert response.json()["data"]["rating"] == 4
        assert response.json()["data"]["rating_type"] == "teaching"

    async def test_duplicate_rating_rejected(self, client: AsyncClient, student_headers, rating_data):
        await client.post("/api/v1/ratings", json=rating_data(), headers=student_headers)
        response = await client.post("/api/v1/ratings", json=rating_data(rating=2), headers=student_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "You have already rated this lecturer for this course and rating type"

    async def test_other_rating_type_allowed(self, client: AsyncClient, student_headers, rating_data):
        await client.post("/api/v1/ratings", json=rating_data(), headers=student_headers)
        response = await client.post(
            "/api/v1/ratings", json=rating_data(rating_type="punctuality"), headers=student_headers
        )

        assert response.status_code == 201

    @pytest.mark.parametrize("overrides,message", [
        ({"rating": 0}, "Rating must be between 1 and 5"),
        ({"rating": 6}, "Rating must be between 1 and 5"),
        ({"rating_type": "looks"}, "Invalid rating type"),
        ({"comment": "x" * 501}, "Comment must be less than 500 characters"),
    ])
    async def test_invalid_rating(self, client: AsyncClient, student_headers, rating_data, overrides, message):
        response = await client.post("/api/v1/ratings", json=rating_data(**overrides), headers=student_headers)

        assert response.status_code == 400
        assert response.json()["message"] == message

    async def test_rated_user_must_be_lecturer(self, client: AsyncClient, student, student_headers, rating_data):
        response = await client.post("/api/v1/ratings", json=rating_data(lecturer_id=student.id), headers=student_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Lecturer not found"

    async def test_lecturers_cannot_rate(self, client: AsyncClient, lecturer_headers, rating_data):
        response = await client.post("/api/v1/ratings", json=rating_data(), headers=lecturer_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Students only."


class TestRatingViews:

    @pytest.fixture
    async def rated(self, client: AsyncClient, student_headers, rating_data):
        await client.post("/api/v1/ratings", json=rating_data(rating=5), headers=student_headers)
        await client.post(
            "/api/v1/ratings",
            json=rating_data(rating=3, rating_type="communication", comment=None),
            headers=student_headers
        )

    async def test_my_ratings(self, client: AsyncClient, rated, student_headers, lecturer):
        response = await client.get("/api/v1/ratings/my-ratings", headers=student_headers)

        ratings = response.json()["data"]
        assert len(ratings) == 2
        assert {r["lecturer_id"] for r in ratings} == {lecturer.id}
        assert ratings[0]["course_code"] == "DIWA2110"

    async def test_lecturer_sees_received_ratings(self, client: AsyncClient, rated, lecturer_headers):
        response = await client.get("/api/v1/ratings/lecturer", headers=lecturer_headers)

        assert len(response.json()["data"]) == 2

    async def test_list_recent(self, client: AsyncClient, rated, prl_headers):
        response = await client.get("/api/v1/ratings", headers=prl_headers)

        assert len(response.json()["data"]) == 2

    async def test_lecturer_stats(self, client: AsyncClient, rated, lecturer, prl_headers):
        response = await client.get(f"/api/v1/ratings/lecturer/{lecturer.id}/stats", headers=prl_headers)

        stats = response.json()["data"]
        assert stats["overall"] == {"overall_rating": 4.0, "total_ratings": 2}
        by_type = {row["rating_type"]: row for row in stats["by_type"]}
        assert by_type["teaching"]["five_star"] == 1
        assert by_type["communication"]["three_star"] == 1
        assert len(stats["recent_comments"]) == 1
        assert stats["recent_comments"][0]["comment"] == "Clear explanations"

    async def test_lecturer_stats_without_ratings(self, client: AsyncClient, other_lecturer, prl_headers):
        response = await client.get(f"/api/v1/ratings/lecturer/{other_lecturer.id}/stats", headers=prl_headers)

        stats = response.json()["data"]
        assert stats["by_type"] == []
        assert stats["overall"] == {"overall_rating": 0, "total_ratings": 0}

    async def test_course_stats(self, client: AsyncClient, rated, course, lecturer, prl_headers):
        response = await client.get(f"/api/v1/ratings/course/{course.id}/stats", headers=prl_headers)

        rows = response.json()["data"]
        assert [row["rating_type"] for row in rows] == ["communication", "teaching"]
        assert all(row["lecturer_id"] == lecturer.id for row in rows)
