from dotenv import load_dotenv

load_dotenv()

from leqet import create_app  # noqa: E402

app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config.get("DEBUG", False), port=5000)
