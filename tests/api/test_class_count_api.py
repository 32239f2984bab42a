'''
HTTP tests for the class counter, the class log and the PDF report.
'''
import pytest
import httpx
from uuid import uuid4

from src.tuition_track.database import models as db_models


async def patch_classes(client: httpx.AsyncClient, tuition_id, headers: dict, **body) -> httpx.Response:
    return await client.patch(f"/tuitions/{tuition_id}/classes", json=body, headers=headers)


@pytest.mark.anyio
class TestClassCountAPI:

    async def test_month_of_classes(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        for expected in (1, 2, 3):
            response = await patch_classes(client, test_tuition_orm.id, teacher_headers, action="increment")
            assert response.status_code == 200
            assert response.json() == {
                "success": True,
                "message": "Class count incremented successfully",
                "newCount": expected,
            }

        detail = (await client.get(f"/tuitions/{test_tuition_orm.id}", headers=teacher_headers)).json()
        assert detail["tuition"]["takenClasses"] == 3
        assert detail["tuition"]["progress"] == 75
        assert len(detail["logs"]) == 3
        assert len(detail["classDates"]) == 3

        response = await patch_classes(client, test_tuition_orm.id, teacher_headers, action="decrement")
        assert response.json()["message"] == "Class count decremented successfully"
        assert response.json()["newCount"] == 2

        response = await patch_classes(client, test_tuition_orm.id, teacher_headers, action="reset")
        assert response.json() == {"success": True, "message": "Class count reset successfully", "newCount": 0}

        logs = await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=teacher_headers)
        assert logs.json()["logs"] == []

    async def test_decrement_at_zero(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await patch_classes(client, test_tuition_orm.id, teacher_headers, action="decrement")

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Cannot decrement below 0"}

        logs = await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=teacher_headers)
        assert logs.json()["logs"] == []

    async def test_backdated_increment(
        self,
        client: httpx.AsyncClient,
        student_headers: dict,
        test_tuition_orm: db_models.Tuitions,
        test_student_orm: db_models.Users
    ):
        response = await patch_classes(
            client, test_tuition_orm.id, student_headers, action="increment", classDate="2024-03-05T16:00:00Z"
        )
        assert response.status_code == 200

        logs = (await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=student_headers)).json()["logs"]
        assert len(logs) == 1
        assert logs[0]["actionType"] == "increment"
        assert logs[0]["addedBy"] == str(test_student_orm.id)
        assert logs[0]["classDate"].startswith("2024-03-05T16:00:00")

    async def test_invalid_action(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await patch_classes(client, test_tuition_orm.id, teacher_headers, action="double")
        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_stranger_cannot_count(
        self,
        client: httpx.AsyncClient,
        unrelated_student_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await patch_classes(client, test_tuition_orm.id, unrelated_student_headers, action="increment")
        assert response.status_code == 403

    async def test_unknown_tuition(self, client: httpx.AsyncClient, teacher_headers: dict):
        response = await patch_classes(client, uuid4(), teacher_headers, action="increment")
        assert response.status_code == 404


@pytest.mark.anyio
class TestClassLogAPI:

    async def test_delete_attendance_log(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        await patch_classes(client, test_tuition_orm.id, teacher_headers, action="increment")
        await patch_classes(client, test_tuition_orm.id, teacher_headers, action="increment")
        logs = (await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=teacher_headers)).json()["logs"]

        response = await client.delete(
            f"/tuitions/{test_tuition_orm.id}/logs/{logs[0]['id']}", headers=teacher_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Class log deleted successfully", "newCount": 1}
        remaining = (await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=teacher_headers)).json()["logs"]
        assert [entry["id"] for entry in remaining] == [logs[1]["id"]]

    async def test_delete_decrement_log(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        await patch_classes(client, test_tuition_orm.id, teacher_headers, action="increment")
        await patch_classes(client, test_tuition_orm.id, teacher_headers, action="decrement")
        logs = (await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=teacher_headers)).json()["logs"]
        decrement = next(entry for entry in logs if entry["actionType"] == "decrement")

        response = await client.delete(
            f"/tuitions/{test_tuition_orm.id}/logs/{decrement['id']}", headers=teacher_headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only class attendance logs can be deleted"

    async def test_delete_unknown_log(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await client.delete(f"/tuitions/{test_tuition_orm.id}/logs/{uuid4()}", headers=teacher_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Class log not found"

    async def test_student_cannot_delete_log(
        self,
        client: httpx.AsyncClient,
        student_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        await patch_classes(client, test_tuition_orm.id, student_headers, action="increment")
        logs = (await client.get(f"/tuitions/{test_tuition_orm.id}/logs", headers=student_headers)).json()["logs"]

        response = await client.delete(
            f"/tuitions/{test_tuition_orm.id}/logs/{logs[0]['id']}", headers=student_headers
        )
        assert response.status_code == 401


@pytest.mark.anyio
class TestReportAPI:

    async def test_download_report(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        await patch_classes(client, test_tuition_orm.id, teacher_headers, action="increment")

        response = await client.get(
            f"/tuitions/{test_tuition_orm.id}/report", params={"month": "2024-03"}, headers=teacher_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == \
            "attachment; filename*=UTF-8''Mathematics_Sam_Student_2024-03.pdf"
        assert response.content.startswith(b"%PDF")

    async def test_download_report_as_student(
        self,
        client: httpx.AsyncClient,
        student_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await client.get(f"/tuitions/{test_tuition_orm.id}/report", headers=student_headers)
        assert response.status_code == 200
        assert "Mathematics_Sam_Student_report.pdf" in response.headers["content-disposition"]

    async def test_bad_month(
        self,
        client: httpx.AsyncClient,
        teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await client.get(
            f"/tuitions/{test_tuition_orm.id}/report", params={"month": "March"}, headers=teacher_headers
        )
        assert response.status_code == 400

    async def test_report_for_stranger(
        self,
        client: httpx.AsyncClient,
        unrelated_teacher_headers: dict,
        test_tuition_orm: db_models.Tuitions
    ):
        response = await client.get(f"/tuitions/{test_tuition_orm.id}/report", headers=unrelated_teacher_headers)
        assert response.status_code == 403
