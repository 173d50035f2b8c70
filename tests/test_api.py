from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError as DRFValidationError

from apps.jobs.models import Job, Rating
from apps.jobs.serializers import RatingSerializer
from apps.notifications.models import Notification
from apps.users.models import User
from core.constants import JobStatus, UserRole
from core.exceptions import InvalidState, marketplace_exception_handler

pytestmark = pytest.mark.django_db


def post_job(api_client, seeker, category, **overrides):
    data = {
        'seekerId': seeker.id,
        'title': 'Fix leaking sink',
        'description': 'Kitchen sink leaks under the cabinet',
        'categoryId': category.id,
        'categoryName': category.name,
        'budget': 100,
        'location': [25.92, -24.63],
        'attributes': {'pipe_type': 'PVC'},
    }
    data.update(overrides)
    return api_client.post('/jobs', data, format='json')


def pay_for(api_client, job_id):
    assert api_client.post(f'/jobs/{job_id}/payment', {}, format='json').status_code == 201
    response = api_client.patch(f'/jobs/{job_id}/payment', {'status': 'Completed', 'method': 'Cash'}, format='json')
    assert response.status_code == 200


class TestJobs:

    def test_post_job(self, api_client, seeker, plumbing):
        response = post_job(api_client, seeker, plumbing)
        assert response.status_code == 201
        body = response.data
        assert body['status'] == 'Open'
        assert body['providerId'] is None
        assert body['categoryName'] == 'Plumbing'
        assert body['location'] == {'type': 'Point', 'coordinates': [25.92, -24.63]}
        assert body['bidCount'] == 0

    def test_post_job_with_missing_fields(self, api_client, seeker, plumbing):
        response = api_client.post('/jobs', {'seekerId': seeker.id, 'title': 'Only a title'}, format='json')
        assert response.status_code == 400
        assert 'error' in response.data
        assert 'budget' in response.data['details']

    def test_post_job_for_unknown_category(self, api_client, seeker, plumbing):
        response = post_job(api_client, seeker, plumbing, categoryId=9999)
        assert response.status_code == 404
        assert response.data == {'error': 'Category not found'}

    def test_get_and_list_jobs(self, api_client, job, seeker):
        assert api_client.get(f'/jobs/{job.id}').data['title'] == job.title
        assert api_client.get('/jobs/9999').status_code == 404

        listed = api_client.get('/jobs', {'seekerId': seeker.id, 'status': 'Open'})
        assert [item['id'] for item in listed.data] == [job.id]
        assert api_client.get('/jobs', {'status': 'Whatever'}).status_code == 400

    @pytest.mark.parametrize('param', ['seekerId', 'requesterId', 'providerId'])
    def test_list_jobs_with_a_malformed_id(self, api_client, job, param):
        response = api_client.get('/jobs', {param: 'abc'})
        assert response.status_code == 400
        assert 'numeric id' in response.data['error']


class TestBidding:

    def test_bid_accept_scenario(self, api_client, seeker, provider, plumbing):
        job_id = post_job(api_client, seeker, plumbing, budget=100, location=[25.92, -24.63]).data['id']

        bid = api_client.post(f'/jobs/{job_id}/bids', {'providerId': provider.id, 'amount': 110}, format='json')
        assert bid.status_code == 201
        assert bid.data['provider']['id'] == provider.id

        accepted = api_client.post(f"/bids/{bid.data['id']}/accept")
        assert accepted.status_code == 200
        assert accepted.data['job']['status'] == 'In Progress'
        assert accepted.data['job']['agreedAmount'] == Decimal('110')
        assert accepted.data['job']['providerId'] == provider.id
        assert accepted.data['bid']['status'] == 'Accepted'
        assert Notification.objects.filter(recipient=provider, type='bid_accepted').exists()

        again = api_client.post(f"/bids/{bid.data['id']}/accept")
        assert again.status_code == 409

    def test_bid_listing_reject_and_withdraw(self, api_client, job, provider, make_provider):
        other = make_provider()
        first = api_client.post(f'/jobs/{job.id}/bids', {'providerId': provider.id, 'amount': 95}, format='json')
        api_client.post(f'/jobs/{job.id}/bids', {'providerId': other.id, 'amount': 90}, format='json')

        assert len(api_client.get(f'/jobs/{job.id}/bids').data) == 2
        duplicate = api_client.post(f'/jobs/{job.id}/bids', {'providerId': provider.id, 'amount': 80}, format='json')
        assert duplicate.status_code == 409

        rejected = api_client.post(f"/bids/{first.data['id']}/reject")
        assert rejected.data['status'] == 'Rejected'

        withdrawn = api_client.delete(f'/jobs/{job.id}/bids/{other.id}')
        assert withdrawn.status_code == 200
        assert api_client.delete(f'/jobs/{job.id}/bids/{other.id}').status_code == 404
        assert [bid['id'] for bid in api_client.get(f'/providers/{provider.id}/bids').data] == [first.data['id']]

    def test_bid_with_bad_amount(self, api_client, job, provider):
        response = api_client.post(f'/jobs/{job.id}/bids', {'providerId': provider.id, 'amount': -1}, format='json')
        assert response.status_code == 400


class TestCompletion:

    def test_complete_without_payment_is_refused(self, api_client, in_progress_job):
        response = api_client.post(f'/jobs/{in_progress_job.id}/complete')
        assert response.status_code == 400
        assert response.data == {'error': 'No payment found for this job'}
        assert Job.objects.get(pk=in_progress_job.id).status == JobStatus.IN_PROGRESS

    def test_payment_then_complete(self, api_client, in_progress_job, provider):
        assert api_client.get(f'/jobs/{in_progress_job.id}/payment').data == {'exists': False}
        pay_for(api_client, in_progress_job.id)
        assert api_client.get(f'/jobs/{in_progress_job.id}/payment').data == {'exists': True, 'status': 'Completed'}
        assert api_client.post(f'/jobs/{in_progress_job.id}/payment', {}, format='json').status_code == 400

        response = api_client.post(f'/jobs/{in_progress_job.id}/complete')
        assert response.status_code == 200
        assert response.data['status'] == 'Completed'
        assert response.data['completedAt'] is not None

        history = api_client.get(f'/providers/{provider.id}/history').data
        assert [item['status'] for item in history] == ['Completed']

    def test_cancel(self, api_client, job, provider):
        assert api_client.post(f'/jobs/{job.id}/cancel', {'requesterId': provider.id}, format='json').status_code == 400
        response = api_client.post(f'/jobs/{job.id}/cancel', {'requesterId': job.seeker_id}, format='json')
        assert response.data['status'] == 'Cancelled'
        assert api_client.post(f'/jobs/{job.id}/cancel', {}, format='json').status_code == 409


class TestAdminStatus:

    def test_requires_an_admin(self, api_client, job, seeker):
        assert api_client.put(f'/jobs/{job.id}/status', {'status': 'Cancelled'}, format='json').status_code in (401, 403)
        api_client.force_authenticate(user=seeker)
        assert api_client.put(f'/jobs/{job.id}/status', {'status': 'Cancelled'}, format='json').status_code == 403

    def test_admin_changes_are_bound_by_the_transition_table(self, api_client, job, admin_user):
        api_client.force_authenticate(user=admin_user)
        assert api_client.put(f'/jobs/{job.id}/status', {'status': 'In Progress'}, format='json').status_code == 409
        assert api_client.put(f'/jobs/{job.id}/status', {'status': 'Done'}, format='json').status_code == 400

        response = api_client.put(f'/jobs/{job.id}/status', {'status': 'Cancelled'}, format='json')
        assert response.status_code == 200
        assert response.data['status'] == 'Cancelled'


class TestNotificationsApi:

    def test_list_and_mark_read(self, api_client, in_progress_job, provider):
        listed = api_client.get(f'/users/{provider.id}/notifications', {'limit': 1})
        assert len(listed.data) == 1
        assert listed.data[0]['userId'] == provider.id
        assert api_client.get(f'/users/{provider.id}/notifications', {'limit': 'all'}).status_code == 400

        note_id = listed.data[0]['id']
        assert api_client.patch(f'/notifications/{note_id}/read').data['read'] is True
        assert api_client.patch('/notifications/987654/read').status_code == 404

        unread = Notification.objects.filter(recipient=provider, read=False).count()
        response = api_client.patch(f'/users/{provider.id}/notifications/read-all')
        assert response.data == {'updated': unread}
        assert not Notification.objects.filter(recipient=provider, read=False).exists()


class TestUsers:

    def test_sign_up_and_lookup(self, api_client):
        response = api_client.post('/users', {
            'authSubject': 'auth0|abc123',
            'firstName': 'Thabo',
            'email': 'thabo@example.com',
            'role': 'Provider',
        }, format='json')
        assert response.status_code == 201
        assert response.data['role'] == 'Provider'
        assert response.data['preferences'] == {'location': None, 'categories': []}

        found = api_client.get('/users/by-subject/auth0|abc123')
        assert found.data['id'] == response.data['id']
        assert api_client.get('/users/by-subject/nobody').status_code == 404

        clash = api_client.post('/users', {'authSubject': 'auth0|abc123', 'role': 'Seeker'}, format='json')
        assert clash.status_code == 400

    def test_provider_preferences(self, api_client, make_user, plumbing):
        provider = make_user(UserRole.PROVIDER)
        response = api_client.put(f'/users/{provider.id}/preferences', {
            'location': {'lat': -24.63, 'lng': 25.92},
            'categories': [{'categoryId': plumbing.id, 'attributes': {'pipe_type': 'Copper'}}],
        }, format='json')
        assert response.status_code == 200
        preferences = response.data['preferences']
        assert preferences['location'] == {'type': 'Point', 'coordinates': [25.92, -24.63]}
        assert preferences['categories'] == [
            {'categoryId': plumbing.id, 'categoryName': 'Plumbing', 'attributes': {'pipe_type': 'Copper'}}
        ]

        bad = api_client.put(f'/users/{provider.id}/preferences', {
            'categories': [{'categoryId': plumbing.id, 'attributes': {'pipe_type': 'Lead'}}],
        }, format='json')
        assert bad.status_code == 400

    def test_seekers_have_no_preferences(self, api_client, seeker):
        response = api_client.put(f'/users/{seeker.id}/preferences', {'location': [25.92, -24.63]}, format='json')
        assert response.status_code == 400

    def test_dashboards(self, api_client, in_progress_job, seeker, provider):
        pay_for(api_client, in_progress_job.id)
        api_client.post(f'/jobs/{in_progress_job.id}/complete')

        provider_board = api_client.get(f'/users/{provider.id}/dashboard').data
        assert provider_board['jobsWon'] == 1
        assert provider_board['jobsAttempted'] == 1
        assert provider_board['activeBids'] == 0
        assert provider_board['completedJobs'] == 1
        assert provider_board['amountEarned'] == Decimal('110')
        assert provider_board['lastCompletedAt'] is not None

        seeker_board = api_client.get(f'/users/{seeker.id}/dashboard').data
        unread = Notification.objects.filter(recipient=seeker, read=False).count()
        assert unread > 0
        assert seeker_board == {
            'openJobs': 0, 'inProgressJobs': 0, 'completedJobs': 1, 'bidsReceived': 1, 'unreadNotifications': unread,
        }

        api_client.patch(f'/users/{seeker.id}/notifications/read-all')
        assert api_client.get(f'/users/{seeker.id}/dashboard').data['unreadNotifications'] == 0


class TestCategoriesAndRatings:

    def test_categories(self, api_client, admin_user, plumbing):
        payload = {'name': 'Gardening', 'description': 'Lawns', 'attributeSchema': {'area': 'Small,Large'}}
        assert api_client.post('/categories', payload, format='json').status_code in (401, 403)

        api_client.force_authenticate(user=admin_user)
        created = api_client.post('/categories', payload, format='json')
        assert created.status_code == 201
        assert created.data['attributeSchema'] == {'area': 'Small,Large'}
        assert api_client.post('/categories', payload, format='json').status_code == 400

        assert [c['name'] for c in api_client.get('/categories').data] == ['Gardening', 'Plumbing']
        assert api_client.get(f"/categories/{created.data['id']}").data['name'] == 'Gardening'
        assert api_client.get('/categories/9999').status_code == 404

    def test_ratings_only_for_completed_jobs(self, api_client, in_progress_job, provider, seeker):
        payload = {'rating': 5, 'feedback': 'Quick and tidy', 'userId': provider.id, 'jobId': in_progress_job.id}
        assert api_client.post('/ratings', payload, format='json').status_code == 400

        pay_for(api_client, in_progress_job.id)
        api_client.post(f'/jobs/{in_progress_job.id}/complete')

        created = api_client.post('/ratings', payload, format='json')
        assert created.status_code == 201
        assert api_client.post('/ratings', payload, format='json').status_code == 400
        assert Rating.objects.count() == 1

        outsider = User.objects.create(username='outsider', role=UserRole.PROVIDER)
        stranger = dict(payload, userId=outsider.id)
        assert api_client.post('/ratings', stranger, format='json').status_code == 400

        assert len(api_client.get('/ratings', {'userId': provider.id}).data) == 1
        assert api_client.get(f"/ratings/{created.data['id']}").data['rating'] == 5
        stats = api_client.get(f'/users/{provider.id}').data['ratingStats']
        assert stats['average_rating'] == 5.0
        assert stats['total_ratings'] == 1

    def test_concurrent_duplicate_rating_is_a_validation_error(self, api_client, in_progress_job, provider):
        pay_for(api_client, in_progress_job.id)
        api_client.post(f'/jobs/{in_progress_job.id}/complete')
        payload = {'rating': 4, 'feedback': 'Good', 'userId': provider.id, 'jobId': in_progress_job.id}

        serializer = RatingSerializer(data=payload)
        assert serializer.is_valid(), serializer.errors
        # another request stores its rating between validation and save
        Rating.objects.create(job=in_progress_job, user=provider, rating=5)

        with pytest.raises(DRFValidationError, match='already been rated'):
            serializer.save()
        assert Rating.objects.count() == 1


class TestMatchApi:

    def test_match_score_and_recommendations(self, api_client, job, provider):
        response = api_client.get(f'/jobs/{job.id}/match/{provider.id}')
        assert response.status_code == 200
        assert response.data['score'] == 60
        assert api_client.get(f'/jobs/{job.id}/match/9999').status_code == 404

        ranked = api_client.get(f'/providers/{provider.id}/jobs').data
        assert [item['job']['id'] for item in ranked] == [job.id]
        assert ranked[0]['score'] == 60


class TestExceptionHandler:

    def test_marketplace_errors_keep_their_status(self):
        response = marketplace_exception_handler(InvalidState("Job is no longer Open"), {})
        assert response.status_code == 409
        assert response.data == {'error': 'Job is no longer Open'}

    def test_drf_validation_errors_carry_details(self):
        response = marketplace_exception_handler(DRFValidationError({'amount': ['A valid number is required.']}), {})
        assert response.status_code == 400
        assert response.data['error'] == 'A valid number is required.'
        assert response.data['details'] == {'amount': ['A valid number is required.']}

    def test_unexpected_errors_become_500(self):
        response = marketplace_exception_handler(RuntimeError("database went away"), {})
        assert response.status_code == 500
        assert response.data == {'error': 'Internal error'}
