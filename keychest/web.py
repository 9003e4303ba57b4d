import logging

from flask import Flask, jsonify, request

from keychest.config import generator_defaults, load_config
from keychest.errors import ConfigurationError
from keychest.evaluator import score_password
from keychest.generator import PasswordConfiguration, generate
from keychest.logging_config import setup_logging

logger = logging.getLogger(__name__)


class InvalidRequest(ValueError):
    """Request body the API cannot interpret."""


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidRequest("request body must be a JSON object")
    return data


def _locale(data, cfg):
    locale = data.get('locale')
    if locale is not None and not isinstance(locale, str):
        raise InvalidRequest("locale must be a string")
    return locale or cfg.get("locale")


def create_app(cfg=None):
    cfg = cfg if cfg is not None else load_config()
    app = Flask(__name__)
    app.config["KEYCHEST"] = cfg

    @app.errorhandler(ConfigurationError)
    def configuration_error(e):
        logger.info("rejected generator settings: %s", e.kind)
        return jsonify({"error": str(e), "kind": e.kind}), 400

    @app.errorhandler(InvalidRequest)
    def bad_request(e):
        return jsonify({"error": str(e), "kind": "bad_request"}), 400

    @app.route('/')
    def home():
        return jsonify({
            "message": "Keychest API is running"
        })

    @app.route('/generate', methods=['POST'])
    def generate_route():
        data = _json_body()
        locale = _locale(data, cfg)
        config = PasswordConfiguration.from_mapping(data, base=generator_defaults(cfg))
        password = generate(config)
        report = score_password(password, locale=locale)
        return jsonify({'password': password, 'strength': report.to_dict()})

    @app.route('/score', methods=['POST'])
    def score_route():
        data = _json_body()
        password = data.get('password', '')
        if not isinstance(password, str):
            raise InvalidRequest("password must be a string")
        report = score_password(password, locale=_locale(data, cfg))
        return jsonify(report.to_dict())

    return app


def main():
    cfg = load_config()
    setup_logging(cfg.get("log_level", "WARNING"))
    create_app(cfg).run(debug=False)


if __name__ == "__main__":
    main()
