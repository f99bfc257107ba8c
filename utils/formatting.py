"""
Presentation helpers for ranking and dashboard responses
Pure functions: no Firestore access, no mutation of inputs
"""

CURRENCY_SYMBOLS = {
    'JPY': '¥',
    'USD': '$',
    'EUR': '€',
}

TREND_INDICATORS = {
    'up': '▲',
    'down': '▼',
    'stable': '●',
}

RANK_BADGES = {
    1: 'crown',
    2: 'trophy',
    3: 'medal',
}

def format_number(num):
    """
    Abbreviate counts: 1234 -> '1.2K', 2500000 -> '2.5M'
    """
    num = num or 0
    if num >= 1000000:
        return f"{num / 1000000:.1f}M"
    elif num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(int(num))

def format_currency(amount, currency='JPY'):
    """
    Symbol-prefixed amount with thousands grouping and no fraction digits
    """
    amount = amount or 0
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = '-' if amount < 0 else ''
    return f"{sign}{symbol}{abs(amount):,.0f}"

def trend_indicator(trend):
    return TREND_INDICATORS.get(trend, TREND_INDICATORS['stable'])

def rank_badge(rank):
    return RANK_BADGES.get(rank, f"#{rank}")

def present_ranked_entry(entry, currency='JPY'):
    """
    Return a copy of a ranked creator entry with display labels attached
    """
    return {
        **entry,
        'display': {
            'rank_badge': rank_badge(entry.get('rank')),
            'followers': format_number(entry.get('follower_count', 0)),
            'likes': format_number(entry.get('total_likes', 0)),
            'views': format_number(entry.get('total_views', 0)),
            'earnings': format_currency(entry.get('monthly_earnings', 0), currency),
            'trend': trend_indicator(entry.get('trend')),
        }
    }
