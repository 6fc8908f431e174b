import os
import sys
import threading

# Make the clinicdesk package importable when run from a checkout or a frozen build.
if getattr(sys, 'frozen', False):
    BASE_DIR = os.path.dirname(sys.executable)
    sys.path.insert(0, BASE_DIR)
    if hasattr(sys, '_MEIPASS'):
        sys.path.insert(0, sys._MEIPASS)
else:
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    sys.path.insert(0, BASE_DIR)

from clinicdesk.app import create_app, open_browser

if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 8080))

    if os.environ.get('CLINIC_OPEN_BROWSER', '0') == '1':
        threading.Timer(1.5, open_browser, args=(port,)).start()

    # use_reloader=False: the reloader would start a second process with its own in-memory store
    app.run(
        debug=False,
        host='0.0.0.0',
        port=port,
        use_reloader=False,
        threaded=True
    )
