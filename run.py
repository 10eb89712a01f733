# run.py
import logging
import click
from flask.cli import with_appcontext
from vetclinic import create_app, db
from vetclinic.scheduler import run_scheduled_reminders
from vetclinic.utils import parse_date

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
app = create_app()


@app.cli.command('init-db')
@with_appcontext
def init_db():
    db.create_all()
    print('Database initialized.')


@app.cli.command('send-reminders')
@click.option('--date', 'date_text', default=None, help='Day to process (YYYY-MM-DD); defaults to today.')
def send_reminders(date_text):
    """Queue reminder emails for every scheduled appointment on a day."""
    target = parse_date(date_text) if date_text else None
    summary = run_scheduled_reminders(app, today=target)
    if summary is None:
        print('Reminders are disabled (REMINDER_ENABLED=false).')
        return
    app.extensions['email_dispatcher'].wait()
    print(f"Reminders for {summary['date']}: {summary['found']} found, {summary['sent']} sent, "
          f"{summary['skipped']} already sent, {summary['failed']} failed.")


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
