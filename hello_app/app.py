from flask import Flask

app = Flask(__name__)

GREETING = "Hello, World!"


@app.route('/')
def hello_world():
    """Serves the fixed greeting."""
    return GREETING
