"""
Tests for the In-memory Fake Client

Tests cover seeding, recording of publishes and uploads, one-shot failures
and the assertion helpers.
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import Account, Post
from services.client import SocialBuClient
from services.protocols import SocialBuClientProtocol
from testing.fake_client import FakeSocialBu
from utils.exceptions import MediaUploadError, ServerError, UploadStep, ValidationError


@pytest.fixture
def fake():
    return FakeSocialBu()


# =============================================================================
# Client Contract Tests
# =============================================================================

class TestFakeContract:
    """The fake answers the same calls as the real client."""

    def test_fake_and_real_client_share_the_protocol(self, fake, session):
        assert isinstance(fake, SocialBuClientProtocol)
        assert isinstance(SocialBuClient(token='t', session=session), SocialBuClientProtocol)

    def test_defaults(self, fake):
        assert fake.is_configured()
        assert fake.get_account_ids() == [1, 2, 3]
        assert fake.get('/anything') == {}
        assert fake.post('/anything', {'a': 1}) == {}
        assert fake.patch('/anything') == {}
        assert fake.delete('/anything') == {}

    def test_publish_to_default_accounts(self, fake):
        post = fake.publish('Hello')

        assert post.id == 1
        assert post.status == 'published'
        assert post.account_ids == [1, 2, 3]
        fake.assert_published_count(1)

    def test_post_ids_are_sequential(self, fake):
        first = fake.create().content('One').send()
        second = fake.create().content('Two').send()

        assert (first.id, second.id) == (1, 2)

    def test_status_follows_draft_and_schedule(self, fake):
        draft = fake.create().content('D').as_draft().send()
        scheduled = fake.create().content('S').scheduled_at('2030-01-01 09:00:00').send()

        assert draft.status == 'draft'
        assert scheduled.status == 'scheduled'
        assert scheduled.is_scheduled()

    def test_publish_with_media_records_upload(self, fake, media_file):
        fake.publish('With photo', media_file)

        fake.assert_uploaded(media_file)
        fake.assert_uploaded_count(1)
        assert fake.uploads == [{'path': media_file, 'id': 1}]
        assert fake.published[0]['attachments'] == [{'upload_token': 'fake-token-1'}]

    def test_upload_result(self, fake):
        upload = fake.media().upload('/photos/cat.jpg')

        assert upload.upload_token == 'fake-token-1'
        assert upload.key == 'uploads/fake-1'
        assert upload.url == 'https://fake-cdn.example.com/fake-1'
        assert upload.secure_key == 'fake-secure-1'
        assert upload.mime_type == 'image/jpeg'
        assert upload.name == 'cat.jpg'

    def test_capabilities_still_validated(self, fake):
        fake.with_accounts([{'id': 9, 'name': 'Insta', 'type': 'instagram'}])

        with pytest.raises(ValidationError):
            fake.create().content('No media').to(9).send()

        fake.assert_nothing_published()


# =============================================================================
# Seeding Tests
# =============================================================================

class TestFakeSeeding:
    """Tests for seeded accounts and posts."""

    def test_accounts_from_dicts_or_models(self, fake):
        fake.with_accounts([{'id': 1, 'name': 'A', 'type': 'facebook'}, Account(id=2, name='B')])

        assert [account.id for account in fake.accounts().list()] == [1, 2]
        assert [account.id for account in fake.accounts().all()] == [1, 2]
        assert fake.accounts().get(2).name == 'B'

    def test_unknown_account(self, fake):
        account = fake.accounts().get(77)

        assert account.name == 'Fake Account'
        assert account.type == 'facebook'

    def test_posts(self, fake):
        fake.with_posts([{'id': 5, 'content': 'Seeded', 'status': 'published'}, Post(6, 'Two', 'draft')])

        assert fake.posts().get(5).content == 'Seeded'
        assert len(fake.posts().paginate()) == 2
        assert [post.id for post in fake.posts().lazy()] == [5, 6]

    def test_unknown_post(self, fake):
        post = fake.posts().get(99)

        assert post.id == 99
        assert post.content == 'Fake post'

    def test_update_and_delete_succeed(self, fake):
        assert fake.posts().update(1, {'content': 'x'}) is True
        assert fake.posts().delete(1) is True


# =============================================================================
# Failure Injection Tests
# =============================================================================

class TestFakeFailures:
    """throw_on_publish / throw_on_upload fire once."""

    def test_throw_on_publish_is_one_shot(self, fake):
        fake.throw_on_publish(ServerError('down', 503))

        with pytest.raises(ServerError):
            fake.publish('First')

        fake.publish('Second')
        fake.assert_published_count(1)
        fake.assert_published('Second')

    def test_throw_on_upload_is_one_shot(self, fake, media_file):
        fake.throw_on_upload(MediaUploadError('nope', UploadStep.CONFIRMATION))

        with pytest.raises(MediaUploadError):
            fake.publish('With photo', media_file)

        fake.assert_nothing_published()
        fake.publish('With photo', media_file)
        fake.assert_uploaded_count(1)


# =============================================================================
# Assertion Helper Tests
# =============================================================================

class TestFakeAssertions:
    """The assertion helpers raise AssertionError on mismatch."""

    def test_assert_published_matches_substring(self, fake):
        fake.publish('Hello world')

        fake.assert_published('world')
        with pytest.raises(AssertionError):
            fake.assert_published('goodbye')

    def test_assert_published_to_ignores_order(self, fake):
        fake.create().content('x').to(3, 1).send()

        fake.assert_published_to([1, 3])
        with pytest.raises(AssertionError):
            fake.assert_published_to([1])

    def test_count_assertions(self, fake):
        fake.assert_nothing_published()
        fake.publish('x')

        with pytest.raises(AssertionError):
            fake.assert_nothing_published()
        with pytest.raises(AssertionError):
            fake.assert_published_count(2)
        with pytest.raises(AssertionError):
            fake.assert_uploaded('/nothing.jpg')
        with pytest.raises(AssertionError):
            fake.assert_uploaded_count(1)
