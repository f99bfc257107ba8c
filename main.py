"""
Creator Rankings Backend - creator subscription platform read APIs
Firebase Cloud Functions + Firestore Backend

Main entry point for the Flask API wrapped as Firebase Functions
"""

import logging
import os

from flask import Flask, request, jsonify
from flask_cors import CORS
from firebase_functions import https_fn, options
import firebase_admin
from firebase_admin import credentials, firestore

from config import Config
from services.genre_service import GenreService
from services.post_ranking_service import PostRankingService
from services.ranking_service import CreatorRankingService, RankingBoard
from services.revenue_service import RevenueService
from utils.auth_middleware import require_auth, require_admin
from utils.error_handler import handle_error, format_success_response

logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

def init_firebase():
    """
    Initialize the Firebase Admin SDK once per process
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        if os.path.exists(Config.SERVICE_ACCOUNT_PATH):
            cred = credentials.Certificate(Config.SERVICE_ACCOUNT_PATH)
            return firebase_admin.initialize_app(cred)
        # Default credentials in production
        return firebase_admin.initialize_app()

def create_app(db):
    app = Flask(__name__)
    CORS(app)

    ranking_service = CreatorRankingService(db)
    ranking_board = RankingBoard(ranking_service)
    post_ranking_service = PostRankingService(db)
    genre_service = GenreService(db)
    revenue_service = RevenueService(db)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'service': 'creator-rankings-backend',
            'version': '1.0.0'
        })

    # ============= RANKING ENDPOINTS =============

    @app.route('/rankings/creators', methods=['GET'])
    @require_auth
    def get_creator_ranking():
        """Creator leaderboard for a period (daily, weekly, monthly, yearly, all_time)"""
        try:
            period = request.args.get('period', 'monthly')
            snapshot = ranking_board.refresh(period)
            status_code = 503 if snapshot.status == 'error' else 200
            return jsonify(snapshot.to_dict(Config.CURRENCY)), status_code
        except Exception as e:
            return handle_error(e)

    @app.route('/rankings/posts', methods=['GET'])
    @require_auth
    def get_post_ranking():
        """Top public posts, optionally for one tag"""
        try:
            tag = request.args.get('tag', 'all').strip()
            posts = post_ranking_service.get_post_ranking(tag)
            return jsonify(format_success_response({'posts': posts, 'tag': tag}))
        except Exception as e:
            return handle_error(e)

    # ============= GENRE ENDPOINTS =============

    @app.route('/genres/counts', methods=['GET'])
    @require_auth
    def get_genre_counts():
        """Post counts per genre"""
        try:
            genres = [genre.strip() for genre in request.args.getlist('genre') if genre.strip()] or None
            counts = genre_service.get_genre_counts(genres)
            return jsonify(format_success_response({'counts': counts}))
        except Exception as e:
            return handle_error(e)

    @app.route('/genres/<genre>/posts', methods=['GET'])
    @require_auth
    def get_genre_posts(genre):
        """Popular posts within a genre"""
        try:
            posts = genre_service.get_genre_posts(genre)
            return jsonify(format_success_response({'genre': genre, 'posts': posts}))
        except Exception as e:
            return handle_error(e)

    # ============= ADMIN ENDPOINTS =============

    @app.route('/admin/revenue', methods=['GET'])
    @require_admin
    def get_revenue():
        """Revenue dashboard totals and transaction listing"""
        try:
            result = revenue_service.get_revenue_stats(
                search=request.args.get('search', '').strip(),
                status=request.args.get('status', 'all'),
                transaction_type=request.args.get('type', 'all')
            )
            return jsonify(format_success_response(result))
        except Exception as e:
            return handle_error(e)

    @app.route('/admin/sales', methods=['GET'])
    @require_admin
    def get_sales():
        """Sales summary by status"""
        try:
            return jsonify(format_success_response(revenue_service.get_sales_summary()))
        except Exception as e:
            return handle_error(e)

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Endpoint not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500

    return app

_flask_app = None

def get_flask_app():
    global _flask_app
    if _flask_app is None:
        init_firebase()
        _flask_app = create_app(firestore.client())
    return _flask_app

# Firebase Cloud Function wrapper
@https_fn.on_request(
    cors=options.CorsOptions(
        cors_origins=["*"],
        cors_methods=["GET", "OPTIONS"]
    )
)
def api(req):
    """Main Cloud Function entry point"""
    flask_app = get_flask_app()
    with flask_app.request_context(req.environ):
        return flask_app.full_dispatch_request()

# For local development
if __name__ == '__main__':
    get_flask_app().run(debug=Config.ENVIRONMENT == 'development', host='0.0.0.0', port=8080)
