import os

from flask import Flask, Blueprint, current_app, render_template, request, redirect, url_for, flash, jsonify, abort
from flask_wtf import FlaskForm
from wtforms import StringField, IntegerField
from wtforms.validators import DataRequired, URL, NumberRange, Optional

from config import Config, check_config
from errors import InvalidSiteError
from models import db, Site
from notifier import setup_logging
from scheduler import build_monitor
from store import SiteStore
from tracker import state_of

bp = Blueprint('sites', __name__)


# ======================
# Forms
# ======================
class SiteForm(FlaskForm):
    url = StringField('Website URL', validators=[DataRequired(), URL(require_tld=False)])
    interval = IntegerField('Check interval (sec)', validators=[DataRequired(), NumberRange(min=1)])
    threshold = IntegerField('Failure threshold', validators=[DataRequired(), NumberRange(min=1)])
    command = StringField('Command to run when down', validators=[Optional()])


def get_monitor():
    return current_app.extensions['uptime_monitor']


# ======================
# Routes
# ======================

@bp.route('/', methods=['GET', 'POST'])
def add_site():
    form = SiteForm(
        interval=current_app.config['DEFAULT_INTERVAL'],
        threshold=current_app.config['DEFAULT_THRESHOLD']
    )
    if form.validate_on_submit():
        try:
            site = SiteStore().add(
                url=form.url.data,
                interval=form.interval.data,
                threshold=form.threshold.data,
                command=form.command.data
            )
        except InvalidSiteError as e:
            flash(str(e), 'danger')
            return render_template('index.html', form=form), 400

        flash(f'Now monitoring: {site.url}', 'success')
        return redirect(url_for('sites.dashboard'))

    status = 400 if request.method == 'POST' else 200
    return render_template('index.html', form=form), status


@bp.route('/dashboard')
def dashboard():
    sites = SiteStore().all()
    states = {site.id: state_of(site).value for site in sites}
    return render_template('dashboard.html', sites=sites, states=states, monitor=get_monitor())


@bp.route('/action/<int:site_id>/remove')
def remove_site(site_id):
    site = SiteStore().remove(site_id)
    if site is None:
        abort(404)
    flash(f'Removed: {site.url}', 'warning')
    return redirect(url_for('sites.dashboard'))


@bp.route('/monitor/<command>')
def monitor_control(command):
    monitor = get_monitor()
    if command == 'start':
        if monitor.start_background():
            flash('Monitoring started', 'success')
        else:
            flash('Monitoring is already running', 'info')
    elif command == 'stop':
        if monitor.stop():
            flash('Monitoring stopped', 'warning')
        else:
            flash('Monitoring is not running', 'info')
    else:
        abort(404)
    return redirect(url_for('sites.dashboard'))


@bp.route('/api/stats')
def api_stats():
    total = Site.query.count()
    failing = Site.query.filter(Site.failures > 0).count()
    fired = Site.query.filter(Site.action_fired.is_(True)).count()
    return jsonify({
        'total': total,
        'failing': failing,
        'fired': fired,
        'monitoring': get_monitor().running
    })


@bp.route('/api/sites')
def api_sites():
    sites = []
    for site in SiteStore().all():
        data = site.to_dict()
        data['id'] = site.id
        data['state'] = state_of(site).value
        sites.append(data)
    return jsonify(sites)


# ======================
# App Setup
# ======================
def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    check_config(app.config)

    if not app.testing:
        setup_logging(app.config['LOG_DIR'], app.config['LOG_LEVEL'])

    db.init_app(app)
    with app.app_context():
        db.create_all()
        SiteStore().load()

    app.extensions['uptime_monitor'] = build_monitor(app)
    app.register_blueprint(bp)
    return app


# ======================
# Run App
# ======================
if __name__ == '__main__':
    app = create_app()
    app.extensions['uptime_monitor'].start_background()
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
