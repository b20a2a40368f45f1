from flask_cors import CORS


def setup_cors(app):
    """
    CORS for the browser client. Origins come from CORS_ORIGINS in config;
    '*' allows any origin (testing only).
    """
    origins = app.config.get('CORS_ORIGINS', [])
    supports_credentials = app.config.get('CORS_SUPPORTS_CREDENTIALS', False)

    CORS(app,
         resources={r"/api/*": {"origins": origins}},
         allow_headers=[
             "Accept",
             "Authorization",
             "Cache-Control",
             "Content-Type",
             "Origin",
             "X-Requested-With",
         ],
         expose_headers=[
             "Content-Disposition",
             "Content-Type",
         ],
         supports_credentials=supports_credentials,
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
         max_age=86400
    )

    @app.after_request
    def add_api_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        return response

    app.logger.info(f"✓ CORS configured with {len(origins)} allowed origins")
