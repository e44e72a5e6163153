import pytest
from rest_framework.test import APIClient

from apps.core.models import User
from apps.domains.courses.models import Chapter, Course, Lesson
from apps.domains.enrollment.models import Enrollment


@pytest.fixture
def teacher(db):
    return User.objects.create_user(username="teacher", password="pw", name="Teacher Kim")


@pytest.fixture
def student(db):
    return User.objects.create_user(username="student", password="pw", name="Jamie")


@pytest.fixture
def outsider(db):
    return User.objects.create_user(username="outsider", password="pw")


@pytest.fixture
def staff(db):
    return User.objects.create_user(username="ops", password="pw", is_staff=True)


@pytest.fixture
def course(teacher):
    return Course.objects.create(title="Python 101", teacher=teacher)


@pytest.fixture
def chapter(course):
    return Chapter.objects.create(course=course, order=1, title="Basics")


@pytest.fixture
def lesson(chapter):
    return Lesson.objects.create(
        chapter=chapter,
        order=1,
        title="Variables",
        youtube_video_id="dQw4w9WgXcQ",
        video_duration=100,
    )


@pytest.fixture
def second_lesson(chapter):
    return Lesson.objects.create(
        chapter=chapter,
        order=2,
        title="Loops",
        youtube_video_id="9bZkp7q19f0",
        video_duration=240,
    )


@pytest.fixture
def enrollment(student, course):
    return Enrollment.objects.create(user=student, course=course, status=Enrollment.Status.ACTIVE)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def _client(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _client
