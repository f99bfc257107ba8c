import pytest
from datetime import timedelta

from services.post_ranking_service import PostRankingService, normalize_tags, post_thumbnail
from utils.error_handler import DatabaseError


@pytest.fixture
def add_public_post(add_post):
    def _add_public_post(user_id, **fields):
        fields.setdefault('visibility', 'public')
        return add_post(user_id, **fields)
    return _add_public_post


class TestPostHelpers:

    def test_normalize_tags(self):
        """Test normalize tags"""
        assert normalize_tags(['a', 'b']) == ['a', 'b']
        assert normalize_tags('  solo ') == ['solo']
        assert normalize_tags('   ') == []
        assert normalize_tags(None) == []

    def test_post_thumbnail(self):
        """Test post thumbnail"""
        assert post_thumbnail({'files': [{'url': 'u', 'thumbnailUrl': 't'}]}) == 't'
        assert post_thumbnail({'files': [{'url': 'u'}]}) == 'u'
        assert post_thumbnail({}) is None


class TestPostRankingService:

    def test_ranks_public_posts_by_score(self, mock_db, add_public_post):
        """Test ranks public posts by score"""
        add_public_post('u1', likes=3, bookmarks=1, doc_id='p1')
        add_public_post('u1', likes=9, bookmarks=0, doc_id='p2')
        add_public_post('u2', likes=1, bookmarks=1, doc_id='p3', visibility='private')

        ranking = PostRankingService(mock_db).get_post_ranking()

        assert [p['id'] for p in ranking] == ['p2', 'p1']
        assert [p['rank'] for p in ranking] == [1, 2]
        assert ranking[0]['score'] == 9

    def test_exclusive_content_is_excluded(self, mock_db, add_public_post):
        """Test exclusive content is excluded"""
        add_public_post('u1', likes=100, doc_id='vip', isExclusiveContent=True)
        add_public_post('u1', likes=1, doc_id='open')

        ranking = PostRankingService(mock_db).get_post_ranking()

        assert [p['id'] for p in ranking] == ['open']

    def test_tag_filter_accepts_string_tags(self, mock_db, add_public_post):
        """Test tag filter accepts string tags"""
        add_public_post('u1', likes=1, doc_id='a', tags='ASMR')
        add_public_post('u1', likes=2, doc_id='b', tags=['Cosplay'])
        add_public_post('u1', likes=3, doc_id='c')

        ranking = PostRankingService(mock_db).get_post_ranking(tag='ASMR')

        assert [p['id'] for p in ranking] == ['a']
        assert ranking[0]['tags'] == ['ASMR']

    def test_equal_scores_newest_first(self, mock_db, add_public_post, now):
        """Test equal scores newest first"""
        add_public_post('u1', likes=5, doc_id='older', created_at=now - timedelta(days=2))
        add_public_post('u1', likes=5, doc_id='newer', created_at=now - timedelta(hours=1))

        ranking = PostRankingService(mock_db).get_post_ranking()

        assert [p['id'] for p in ranking] == ['newer', 'older']

    def test_author_fields_come_from_profile(self, mock_db, add_public_post, add_creator):
        """Test author fields come from profile"""
        add_creator('u1', displayName='Profile Name', photoURL='https://cdn/p.png')
        add_public_post('u1', likes=1, userName='Stale Name')
        add_public_post('ghost', likes=0, userName='Kept Name')

        ranking = PostRankingService(mock_db).get_post_ranking()

        assert ranking[0]['user_name'] == 'Profile Name'
        assert ranking[0]['user_avatar'] == 'https://cdn/p.png'
        assert ranking[1]['user_name'] == 'Kept Name'

    def test_failed_author_lookup_keeps_post_fields(self, mock_db, add_public_post, add_creator, mocker):
        """Test failed author lookup keeps post fields"""
        add_creator('u1', displayName='Profile One', photoURL='https://cdn/one.png')
        add_creator('u2', displayName='Profile Two', photoURL='https://cdn/two.png')
        add_public_post('u1', likes=2, doc_id='p1', userName='Stored One')
        add_public_post('u2', likes=1, doc_id='p2', userName='Stored Two', userAvatar='https://cdn/stored.png')

        users = mock_db.collection('users')
        real_document = users.document

        def document(user_id):
            doc = real_document(user_id)
            if user_id == 'u2':
                doc.get = mocker.Mock(side_effect=RuntimeError('deadline exceeded'))
            return doc

        mocker.patch.object(users, 'document', side_effect=document)

        ranking = PostRankingService(mock_db).get_post_ranking()

        assert [p['id'] for p in ranking] == ['p1', 'p2']
        assert ranking[0]['user_name'] == 'Profile One'
        assert ranking[0]['user_avatar'] == 'https://cdn/one.png'
        assert ranking[1]['user_name'] == 'Stored Two'
        assert ranking[1]['user_avatar'] == 'https://cdn/stored.png'

    def test_top_n_cap(self, mock_db, add_public_post):
        """Test output capped at top N"""
        for i in range(8):
            add_public_post('u1', likes=i)

        ranking = PostRankingService(mock_db, top_n=5).get_post_ranking()

        assert len(ranking) == 5
        assert ranking[0]['likes'] == 7

    def test_fetch_failure(self, mock_db):
        """Test post fetch failure raises DatabaseError"""
        mock_db.collection('posts').fail_with = RuntimeError('boom')

        with pytest.raises(DatabaseError):
            PostRankingService(mock_db).get_post_ranking()
