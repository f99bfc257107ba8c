"""
Revenue Service for the Creator Rankings backend
Admin revenue dashboard totals and sales summary
"""

import logging
import math

from services.ranking_service import engagement_count as _amount
from utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

# Purchase price = creator base price * 1.2 (10% platform fee + 10% tax)
PURCHASE_MARKUP = 1.2
PLATFORM_FEE_RATE = 0.10
TAX_RATE = 0.10
# System usage fee on payouts: 15% plus 10% consumption tax
SYSTEM_FEE_RATE = 0.165

def split_transaction(transaction):
    """
    Platform fee, tax and creator share for one transaction.

    Stored values are used when all three are present; otherwise they are
    back-computed from the purchase amount.
    """
    if all(isinstance(transaction.get(key), (int, float))
           for key in ('platformFee', 'tax', 'creatorAmount')):
        return transaction['platformFee'], transaction['tax'], transaction['creatorAmount']

    base_price = math.floor(_amount(transaction, 'amount') / PURCHASE_MARKUP)
    platform_fee = math.floor(base_price * PLATFORM_FEE_RATE)
    tax = math.floor(base_price * TAX_RATE)
    return platform_fee, tax, base_price

def normalize_sale_status(status):
    if status in ('completed', 'pending'):
        return status
    return 'failed'

def compute_revenue_stats(transactions, transfers):
    """
    Dashboard totals over raw transaction and transfer request documents.
    """
    total_revenue = 0
    platform_fee = 0
    tax = 0
    creator_payments = 0
    pending_amount = 0

    for transaction in transactions:
        amount = _amount(transaction, 'amount')
        fee, tax_part, creator_part = split_transaction(transaction)

        total_revenue += amount
        platform_fee += fee
        tax += tax_part
        creator_payments += creator_part
        if (transaction.get('status') or 'pending') == 'pending':
            pending_amount += amount

    purchase_revenue = platform_fee + tax

    # Transfer request sums override the transaction-based estimate one
    # figure at a time, and only when that sum is positive
    requested_system_fee = sum(
        _amount(t, 'platformFee') + _amount(t, 'platformFeeTax') for t in transfers
    )
    requested_bank_fee = sum(_amount(t, 'transferFee') for t in transfers)

    transfer_system_fee = (requested_system_fee if requested_system_fee > 0
                           else math.floor(creator_payments * SYSTEM_FEE_RATE))
    transfer_bank_fee = max(requested_bank_fee, 0)

    if transfers:
        actual_creator_payouts = sum(_amount(t, 'netAmount') for t in transfers)
    else:
        actual_creator_payouts = creator_payments - transfer_system_fee - transfer_bank_fee

    transfer_revenue = transfer_system_fee + transfer_bank_fee

    return {
        'total_revenue': total_revenue,
        'platform_fee': platform_fee,
        'tax': tax,
        'purchase_revenue': purchase_revenue,
        'creator_payments': creator_payments,
        'transfer_system_fee': transfer_system_fee,
        'transfer_bank_fee': transfer_bank_fee,
        'transfer_revenue': transfer_revenue,
        'total_platform_profit': purchase_revenue + transfer_revenue,
        'actual_creator_payouts': actual_creator_payouts,
        'pending_amount': pending_amount,
        'transaction_count': len(transactions)
    }

def filter_transactions(transactions, search=None, status='all', transaction_type='all'):
    search = (search or '').lower()
    filtered = []
    for transaction in transactions:
        if search and not any(
            search in (transaction.get(key) or '').lower()
            for key in ('id', 'user_name', 'creator_name')
        ):
            continue
        if status != 'all' and transaction.get('status') != status:
            continue
        if transaction_type != 'all' and transaction.get('type') != transaction_type:
            continue
        filtered.append(transaction)
    return filtered

class RevenueService:
    def __init__(self, db):
        self.db = db
        self.transactions_ref = db.collection('transactions')
        self.transfers_ref = db.collection('transferRequests')

    def _fetch_transactions(self):
        try:
            query = self.transactions_ref.order_by('createdAt', direction='DESCENDING')
            transactions = []
            for doc in query.stream():
                data = doc.to_dict() or {}
                data['id'] = doc.id
                transactions.append(data)
            return transactions
        except Exception as e:
            logger.error(f"Error fetching transactions: {str(e)}")
            raise DatabaseError(f"Failed to fetch transactions: {str(e)}")

    def _fetch_transfers(self):
        try:
            return [doc.to_dict() or {} for doc in self.transfers_ref.stream()]
        except Exception as e:
            logger.error(f"Error fetching transfer requests: {str(e)}")
            raise DatabaseError(f"Failed to fetch transfer requests: {str(e)}")

    def get_revenue_stats(self, search=None, status='all', transaction_type='all'):
        """
        Revenue totals plus the (optionally filtered) transaction listing
        """
        transactions = self._fetch_transactions()
        transfers = self._fetch_transfers()

        stats = compute_revenue_stats(transactions, transfers)

        listing = []
        for transaction in transactions:
            fee, tax_part, creator_part = split_transaction(transaction)
            listing.append({
                'id': transaction['id'],
                'type': transaction.get('type') or 'subscription',
                'amount': _amount(transaction, 'amount'),
                'fees': {
                    'platform_fee': fee,
                    'tax': tax_part,
                    'total_fees': fee + tax_part
                },
                'net_amount': creator_part,
                'status': transaction.get('status') or 'pending',
                'user_name': transaction.get('userName') or transaction.get('customerName') or 'Unknown',
                'creator_name': transaction.get('creatorName') or 'Unknown',
                'created_at': transaction.get('createdAt'),
                'payment_method': transaction.get('paymentMethod') or 'credit_card'
            })

        return {
            'stats': stats,
            'transactions': filter_transactions(listing, search, status, transaction_type)
        }

    def get_sales_summary(self):
        transactions = self._fetch_transactions()
        statuses = [normalize_sale_status(t.get('status')) for t in transactions]

        return {
            'total': len(transactions),
            'total_revenue': sum(
                _amount(t, 'amount')
                for t, status in zip(transactions, statuses)
                if status == 'completed'
            ),
            'completed': statuses.count('completed'),
            'pending': statuses.count('pending'),
            'failed': statuses.count('failed')
        }
