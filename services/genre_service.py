"""
Genre Service for the Creator Rankings backend
Per-genre post counts and popular posts within a genre
"""

from datetime import datetime
import logging

import pytz

from config import Config
from services.post_ranking_service import DEFAULT_AUTHOR, DEFAULT_TITLE, post_thumbnail
from services.ranking_service import engagement_count
from utils.error_handler import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

def time_ago(created_at, now=None):
    """
    Short relative label for a post timestamp
    """
    if not isinstance(created_at, datetime):
        return 'unknown'
    if now is None:
        now = datetime.now(pytz.utc)
    if created_at.tzinfo is None:
        created_at = pytz.utc.localize(created_at)

    minutes = int((now - created_at).total_seconds() // 60)
    if minutes < 1:
        return 'just now'
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    return created_at.strftime('%Y-%m-%d')

class GenreService:
    def __init__(self, db, posts_limit=None):
        self.db = db
        self.posts_ref = db.collection('posts')
        self.posts_limit = posts_limit or Config.GENRE_POSTS_LIMIT

    def get_genre_count(self, genre):
        """
        Number of posts listing `genre`; 0 if the count query fails
        """
        try:
            query = self.posts_ref.where('genres', 'array_contains', genre)
            return sum(1 for _ in query.stream())
        except Exception as e:
            logger.error(f"Error getting count for genre '{genre}': {str(e)}")
            return 0

    def get_genre_counts(self, genres=None):
        genres = genres or Config.GENRE_NAMES
        counts = {genre: self.get_genre_count(genre) for genre in genres}
        logger.info(f"Loaded counts for {len(counts)} genres")
        return counts

    def get_genre_posts(self, genre, now=None):
        """
        Newest posts tagged with `genre`, reordered by likes + bookmarks
        """
        if not genre:
            raise ValidationError("Genre is required", field='genre')

        try:
            query = (
                self.posts_ref
                .where('tags', 'array_contains', genre)
                .order_by('createdAt', direction='DESCENDING')
                .limit(self.posts_limit)
            )
            post_docs = list(query.stream())
        except Exception as e:
            logger.error(f"Error fetching posts for genre '{genre}': {str(e)}")
            raise DatabaseError(f"Failed to fetch posts for genre: {str(e)}")

        posts = []
        for post_doc in post_docs:
            post_data = post_doc.to_dict() or {}
            files = post_data.get('files') or []
            likes = engagement_count(post_data, 'likes')
            bookmarks = engagement_count(post_data, 'bookmarks')
            posts.append({
                'id': post_doc.id,
                'title': post_data.get('title') or DEFAULT_TITLE,
                'likes': likes,
                'bookmarks': bookmarks,
                'type': (files[0] or {}).get('resourceType', 'image') if files else 'image',
                'thumbnail': post_thumbnail(post_data),
                'user': {
                    'id': post_data.get('userId'),
                    'name': post_data.get('userName') or DEFAULT_AUTHOR,
                    'avatar': post_data.get('userAvatar') or Config.DEFAULT_AVATAR_URL
                },
                'time_ago': time_ago(post_data.get('createdAt'), now),
                'score': likes + bookmarks
            })

        posts.sort(key=lambda post: post['score'], reverse=True)
        return posts
