import itertools

import pytest
from django.apps import apps
from rest_framework.test import APIClient

from apps.jobs.lifecycle import get_lifecycle
from apps.jobs.models import Category
from apps.users.models import User, ProviderProfile, ProviderCategory
from core.constants import UserRole
from tests.channels import RecordingChannel

# Gaborone, as [lng, lat]
JOB_LOCATION = [25.92, -24.63]


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def push_registry():
    return apps.get_app_config('notifications').push_registry


@pytest.fixture
def push_channel(push_registry):
    channel = RecordingChannel()
    push_registry.register_broadcast(channel)
    yield channel
    push_registry.unregister_broadcast(channel)


@pytest.fixture
def lifecycle(db):
    return get_lifecycle()


@pytest.fixture
def plumbing(db):
    return Category.objects.create(
        name='Plumbing',
        description='Pipes, drains and water heaters',
        attribute_schema={'pipe_type': 'PVC,Copper', 'urgency': 'Low,High'},
    )


@pytest.fixture
def electrical(db):
    return Category.objects.create(name='Electrical', description='Wiring and fittings')


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role=UserRole.SEEKER, **extra):
        n = next(counter)
        name = f"{str(role).lower()}{n}"
        return User.objects.create(username=name, email=f"{name}@example.com", role=role, **extra)

    return _make


@pytest.fixture
def make_provider(make_user, plumbing):
    def _make(category=None, attributes=None, location=(-24.63, 25.92)):
        user = make_user(UserRole.PROVIDER)
        latitude, longitude = location if location else (None, None)
        profile = ProviderProfile.objects.create(user=user, base_latitude=latitude, base_longitude=longitude)
        ProviderCategory.objects.create(provider=profile, category=category or plumbing, attributes=attributes or {})
        return user

    return _make


@pytest.fixture
def seeker(make_user):
    return make_user(UserRole.SEEKER)


@pytest.fixture
def provider(make_provider):
    return make_provider(attributes={'pipe_type': 'PVC'})


@pytest.fixture
def admin_user(make_user):
    return make_user(role=None, is_staff=True)


@pytest.fixture
def make_job(lifecycle, seeker, plumbing):
    def _make(budget=100, location=None, attributes=None, owner=None, title='Fix leaking sink'):
        return lifecycle.post_job(
            seeker_id=(owner or seeker).id,
            title=title,
            description='Kitchen sink leaks under the cabinet',
            category_id=plumbing.id,
            category_name=plumbing.name,
            budget=budget,
            location=location or JOB_LOCATION,
            attributes=attributes or {},
        )

    return _make


@pytest.fixture
def job(make_job):
    return make_job()


@pytest.fixture
def in_progress_job(lifecycle, job, provider):
    bid = lifecycle.place_bid(job.id, provider.id, 110)
    job, _ = lifecycle.accept_bid(bid.id)
    return job
