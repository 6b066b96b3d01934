# app.py
# Flask application using the Application Factory pattern

import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from aggregation import MeanRounding, RankingTies
from config import Config
from errors import ReviewError
from extensions import db, migrate

# Imported so Flask-Migrate sees every table
from models import Proposal, Reviewer, Criterion, Score, Evaluation

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Fail at startup rather than on the first results request
    MeanRounding(app.config['MEAN_ROUNDING'])
    RankingTies(app.config['RANKING_TIES'])

    db.init_app(app)
    migrate.init_app(app, db)

    from routes.auth import auth_bp
    from routes.main import main_bp
    from routes.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(ReviewError)
    def handle_review_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        body = {'data': None, 'error': {'message': error.description, 'code': error.name.upper().replace(' ', '_')}}
        return jsonify(body), error.code

    @app.cli.command('seed-rubric')
    def seed_rubric_command():
        """Create tables and load the built-in rubric."""
        from rubric import load_rubric
        db.create_all()
        added = load_rubric()
        click.echo(f'{added} criteria added, {Criterion.query.count()} in total.')

    return app
