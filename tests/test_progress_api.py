import pytest

from apps.domains.enrollment.models import Enrollment
from apps.domains.progress.models import LessonProgress
from apps.domains.progress.services import record_completion

pytestmark = pytest.mark.django_db

URL = "/api/v1/progress/"


def test_completion_recorded(client_for, student, lesson, enrollment):
    resp = client_for(student).post(URL, {"lessonId": lesson.id, "watchTime": 92}, format="json")

    assert resp.status_code == 200
    body = resp.json()
    assert body["lessonId"] == lesson.id
    assert body["courseId"] == lesson.chapter.course_id
    assert body["completed"] is True
    assert body["completedAt"]
    assert body["watchTime"] == 92


def test_repeated_completion_is_idempotent(client_for, student, lesson, enrollment):
    client = client_for(student)
    first = client.post(URL, {"lessonId": lesson.id, "watchTime": 92}, format="json").json()
    second = client.post(URL, {"lessonId": lesson.id, "watchTime": 50}, format="json").json()
    third = client.post(URL, {"lessonId": lesson.id, "watchTime": 99}, format="json").json()

    assert LessonProgress.objects.filter(user=student, lesson=lesson).count() == 1
    assert first["completedAt"] == second["completedAt"] == third["completedAt"]
    assert second["watchTime"] == 92
    assert third["watchTime"] == 99


def test_not_completed_then_completed(student, lesson, enrollment):
    obj = record_completion(user=student, lesson=lesson, watch_time=10, completed=False)
    assert obj.completed is False
    assert obj.completed_at is None

    obj = record_completion(user=student, lesson=lesson, watch_time=5, completed=True)
    assert obj.completed is True
    assert obj.completed_at is not None
    assert obj.watch_time == 10


def test_completion_never_reverts(student, lesson, enrollment):
    record_completion(user=student, lesson=lesson, watch_time=90)
    obj = record_completion(user=student, lesson=lesson, watch_time=0, completed=False)
    assert obj.completed is True


def test_enrollment_progress_recomputed(student, lesson, second_lesson, enrollment):
    record_completion(user=student, lesson=lesson, watch_time=90)
    enrollment.refresh_from_db()
    assert enrollment.progress == 50
    assert enrollment.completed_at is None

    record_completion(user=student, lesson=second_lesson, watch_time=230)
    enrollment.refresh_from_db()
    assert enrollment.progress == 100
    assert enrollment.completed_at is not None


def test_not_entitled_cannot_record(client_for, outsider, lesson):
    resp = client_for(outsider).post(URL, {"lessonId": lesson.id}, format="json")

    assert resp.status_code == 403
    assert not LessonProgress.objects.exists()


def test_pending_enrollment_cannot_record(client_for, student, course, lesson):
    Enrollment.objects.create(user=student, course=course, status=Enrollment.Status.PENDING)
    assert client_for(student).post(URL, {"lessonId": lesson.id}, format="json").status_code == 403


def test_unknown_lesson(client_for, student, enrollment):
    assert client_for(student).post(URL, {"lessonId": 999999}, format="json").status_code == 404


def test_unauthenticated(api_client, lesson):
    assert api_client.post(URL, {"lessonId": lesson.id}, format="json").status_code == 401


def test_list_requires_course_id(client_for, student):
    resp = client_for(student).get(URL)

    assert resp.status_code == 400
    assert resp.json() == {"detail": "course_id is required"}


def test_list_returns_only_own_records_for_course(
    client_for, student, outsider, teacher, lesson, second_lesson, enrollment
):
    from apps.domains.courses.models import Chapter, Course, Lesson

    other_course = Course.objects.create(title="Other", teacher=teacher)
    other_lesson = Lesson.objects.create(
        chapter=Chapter.objects.create(course=other_course, title="X"),
        title="Y",
        youtube_video_id="abc",
    )

    record_completion(user=student, lesson=lesson, watch_time=90)
    record_completion(user=student, lesson=other_lesson, watch_time=10)
    record_completion(user=outsider, lesson=second_lesson, watch_time=10)

    resp = client_for(student).get(URL, {"course_id": lesson.chapter.course_id})

    assert resp.status_code == 200
    assert [row["lessonId"] for row in resp.json()] == [lesson.id]


def test_list_filters_completed(client_for, student, lesson, second_lesson, enrollment):
    record_completion(user=student, lesson=lesson, watch_time=90)
    record_completion(user=student, lesson=second_lesson, watch_time=30, completed=False)

    resp = client_for(student).get(URL, {"course_id": lesson.chapter.course_id, "completed": "true"})

    assert [row["lessonId"] for row in resp.json()] == [lesson.id]
