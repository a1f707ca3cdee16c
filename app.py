import os

from lendadmin import create_app

app = create_app()

if __name__ == "__main__":
    # The lending API defaults to port 5000, so the console listens elsewhere
    port = int(os.environ.get("PORT", "3000"))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG") == "1")
