# Gunicorn для API панели клуба.
# Логи в stdout/stderr, их собирает systemd / docker.
#
#   gunicorn catalog_panel.wsgi:application -c gunicorn.conf.py
import os
import multiprocessing

# PORT общий с settings.PORT
bind = os.environ.get('GUNICORN_BIND', f"0.0.0.0:{os.environ.get('PORT', '3000')}")

workers = int(os.environ.get('GUNICORN_WORKERS', (2 * multiprocessing.cpu_count()) + 1))

# Запросы в основном ждут БД и S3, потоки дешевле процессов
worker_class = os.environ.get('GUNICORN_WORKER_CLASS', 'gthread')
threads = int(os.environ.get('GUNICORN_THREADS', '4'))

timeout = 60  # presign и отправка письма укладываются с запасом
graceful_timeout = 30
keepalive = 5

max_requests = 2000
max_requests_jitter = 200

loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')
accesslog = '-'
errorlog = '-'
capture_output = True


def on_starting(server):
    server.log.info(f"Gunicorn starting: {workers} {worker_class} workers on {bind}")
