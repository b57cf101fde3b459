def register_blueprints(app):
    from credibility.routes.health import health_bp
    from credibility.routes.scores import scores_bp
    from credibility.routes.admin import admin_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(scores_bp, url_prefix='/api/scores')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
