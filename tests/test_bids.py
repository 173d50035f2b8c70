import pytest
from django.db.models.query import QuerySet

from apps.jobs import bids
from apps.jobs.models import Bid, Job
from apps.notifications.models import Notification
from apps.users.models import User
from core.constants import BidStatus, UserRole
from core.exceptions import InvalidState, NotFound, ValidationError

pytestmark = pytest.mark.django_db


def test_place_bid_denormalizes_seeker_and_notifies(lifecycle, job, provider, seeker, push_channel,
                                                    django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        bid = lifecycle.place_bid(job.id, provider.id, '95')
    assert bid.status == BidStatus.PENDING
    assert bid.seeker_id == seeker.id

    notification = Notification.objects.get(recipient=seeker, type='new_bid')
    assert notification.data == {'jobId': job.id, 'bidId': bid.id, 'bidAmount': '95.00'}
    assert 'bidAdded' in push_channel.names


def test_duplicate_bid_on_same_job_is_refused(lifecycle, job, provider):
    lifecycle.place_bid(job.id, provider.id, 95)
    with pytest.raises(InvalidState, match='already placed a bid'):
        lifecycle.place_bid(job.id, provider.id, 90)
    assert Bid.objects.filter(job=job, provider=provider).count() == 1


def test_provider_has_one_outstanding_bid_at_a_time(lifecycle, make_job, provider):
    first = make_job(title='First')
    second = make_job(title='Second')
    lifecycle.place_bid(first.id, provider.id, 95)
    with pytest.raises(InvalidState, match='outstanding bid'):
        lifecycle.place_bid(second.id, provider.id, 95)


def test_bid_locks_the_provider_before_the_job(job, provider, monkeypatch):
    locked = []
    select_for_update = QuerySet.select_for_update

    def recording(self, *args, **kwargs):
        locked.append(self.model)
        return select_for_update(self, *args, **kwargs)

    monkeypatch.setattr(QuerySet, 'select_for_update', recording)
    bids.place_bid(job.id, provider.id, 95)
    assert locked == [User, Job]


def test_outstanding_bid_rule_can_be_switched_off(lifecycle, make_job, provider, settings):
    settings.MARKETPLACE = dict(settings.MARKETPLACE, SINGLE_OUTSTANDING_BID=False)
    first = make_job(title='First')
    second = make_job(title='Second')
    lifecycle.place_bid(first.id, provider.id, 95)
    lifecycle.place_bid(second.id, provider.id, 95)
    assert Bid.objects.filter(provider=provider).count() == 2


def test_bid_requires_a_provider_and_positive_amount(lifecycle, job, provider, make_user):
    with pytest.raises(ValidationError, match='Only providers'):
        lifecycle.place_bid(job.id, make_user(UserRole.SEEKER).id, 95)
    with pytest.raises(ValidationError, match='greater than zero'):
        lifecycle.place_bid(job.id, provider.id, 0)
    with pytest.raises(NotFound, match='Provider'):
        lifecycle.place_bid(job.id, 9999, 95)
    with pytest.raises(NotFound, match='Job'):
        lifecycle.place_bid(9999, provider.id, 95)


def test_cannot_bid_on_job_that_is_not_open(lifecycle, job, provider, make_provider):
    lifecycle.cancel_job(job.id)
    with pytest.raises(InvalidState, match='Cancelled'):
        lifecycle.place_bid(job.id, provider.id, 95)


def test_reject_bid_keeps_job_open(lifecycle, job, provider):
    bid = lifecycle.place_bid(job.id, provider.id, 95)
    rejected = lifecycle.reject_bid(bid.id)
    job.refresh_from_db()

    assert rejected.status == BidStatus.REJECTED
    assert job.status == 'Open'
    assert Notification.objects.filter(recipient=provider, type='bid_rejected').exists()
    with pytest.raises(InvalidState):
        lifecycle.reject_bid(bid.id)


def test_rejected_bid_frees_provider_for_another_job(lifecycle, make_job, provider):
    first = make_job(title='First')
    second = make_job(title='Second')
    bid = lifecycle.place_bid(first.id, provider.id, 95)
    lifecycle.reject_bid(bid.id)
    assert lifecycle.place_bid(second.id, provider.id, 95).job_id == second.id


def test_withdraw_bid_deletes_it_and_notifies_seeker(lifecycle, job, provider, seeker, push_channel,
                                                     django_capture_on_commit_callbacks):
    lifecycle.place_bid(job.id, provider.id, 95)
    with django_capture_on_commit_callbacks(execute=True):
        lifecycle.withdraw_bid(job.id, provider.id)

    assert not Bid.objects.filter(job=job).exists()
    assert Notification.objects.filter(recipient=seeker, type='bid_withdrawn').exists()
    assert 'bidDeleted' in push_channel.names
    with pytest.raises(NotFound):
        lifecycle.withdraw_bid(job.id, provider.id)


def test_accepted_bid_cannot_be_withdrawn(lifecycle, in_progress_job, provider):
    with pytest.raises(InvalidState, match='accepted'):
        lifecycle.withdraw_bid(in_progress_job.id, provider.id)


def test_bids_are_listed_newest_first(lifecycle, job, make_provider):
    older = lifecycle.place_bid(job.id, make_provider().id, 95)
    newer = lifecycle.place_bid(job.id, make_provider().id, 85)
    assert [bid.id for bid in bids.list_bids_for_job(job.id)] == [newer.id, older.id]
    assert [bid.id for bid in bids.list_bids_for_provider(older.provider_id)] == [older.id]
