"""
Content Store for the Creator Rankings backend
Windowed post reads and batched profile lookups against Firestore
"""

from datetime import datetime
import logging

from dateutil.relativedelta import relativedelta
import pytz

from config import Config
from utils.error_handler import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

PERIOD_OFFSETS = {
    'daily': relativedelta(days=1),
    'weekly': relativedelta(days=7),
    'monthly': relativedelta(months=1),
    'yearly': relativedelta(years=1),
}

ALL_TIME_START = datetime(2000, 1, 1, tzinfo=pytz.utc)

SUPPORTED_PERIODS = tuple(PERIOD_OFFSETS) + ('all_time',)

def get_window_start(period, now=None):
    """
    Start of the ranking window for a period name.
    Monthly and yearly windows are calendar offsets, not fixed day counts.
    """
    if now is None:
        now = datetime.now(pytz.utc)

    if period == 'all_time':
        return ALL_TIME_START
    if period not in PERIOD_OFFSETS:
        raise ValidationError(
            f"Invalid period '{period}'. Expected one of: {', '.join(SUPPORTED_PERIODS)}",
            field='period'
        )
    return now - PERIOD_OFFSETS[period]

def chunk_ids(ids, size):
    return [ids[i:i + size] for i in range(0, len(ids), size)]

def snapshot_to_record(doc):
    data = doc.to_dict() or {}
    data['id'] = doc.id
    return data

class ContentStore:
    def __init__(self, db, record_limit=None, batch_size=None):
        self.db = db
        self.record_limit = record_limit or Config.RANKING_RECORD_LIMIT
        self.batch_size = batch_size or Config.PROFILE_BATCH_SIZE

    def fetch_records_in_window(self, collection, created_after, limit=None):
        """
        Records created at or after `created_after`, newest first, capped at `limit`.

        The cap decides which records the ranking can see at all: owners whose
        activity falls outside the newest `limit` records are invisible.
        """
        limit = limit or self.record_limit
        try:
            query = (
                self.db.collection(collection)
                .where('createdAt', '>=', created_after)
                .order_by('createdAt', direction='DESCENDING')
                .limit(limit)
            )
            records = [snapshot_to_record(doc) for doc in query.stream()]
        except Exception as e:
            logger.error(f"Error fetching {collection} records since {created_after}: {str(e)}")
            raise DatabaseError(f"Failed to fetch {collection} records: {str(e)}")

        logger.debug(f"Fetched {len(records)} {collection} records since {created_after}")
        return records

    def fetch_profiles_by_ids(self, collection, ids):
        """
        Profiles for the given document ids, one `in` query per batch.
        Batches run sequentially in id order; missing ids are simply absent.
        """
        ids = list(ids)
        if not ids:
            return []

        collection_ref = self.db.collection(collection)
        profiles = []
        for batch in chunk_ids(ids, self.batch_size):
            try:
                refs = [collection_ref.document(doc_id) for doc_id in batch]
                query = collection_ref.where('__name__', 'in', refs)
                profiles.extend(snapshot_to_record(doc) for doc in query.stream())
            except Exception as e:
                logger.error(f"Error fetching {collection} profiles batch {batch}: {str(e)}")
                raise DatabaseError(f"Failed to fetch {collection} profiles: {str(e)}")

        return profiles
