"""
Manual smoke test against a running server:
    python manage.py runserver 0.0.0.0:3000
    python smoke_api.py
"""
import json
import os

import requests

BASE_URL = os.environ.get("MEDIA_SERVER_URL", "http://localhost:3000/api")

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000105d7d8b10000000049454e44ae426082"
)


def print_response(response, title):
    print(f"\n=== {title} ===")
    print(f"Status Code: {response.status_code}")
    try:
        print("Response:", json.dumps(response.json(), indent=2))
    except ValueError:
        print("Response:", response.text)
    print("=" * 50)


def list_media(path=""):
    """GET /api/media/<path>"""
    response = requests.get(f"{BASE_URL}/media/{path}")
    print_response(response, f"List Media ({path or 'root'})")
    return response


def upload(name, content, content_type):
    """POST /api/upload"""
    files = {"uploaded_file": (name, content, content_type)}
    response = requests.post(f"{BASE_URL}/upload", files=files)
    print_response(response, f"Upload {name} ({content_type})")
    return response


def main():
    print("Starting media API smoke run...")

    list_media()

    accepted = upload("smoke-pixel", PNG_BYTES, "image/png")
    if accepted.status_code == 201:
        print("Stored at:", accepted.headers.get("Location"))
        list_media(accepted.headers["Location"].rsplit("/", 1)[-1])
    else:
        print("Image upload failed, skipping file info check")

    rejected = upload("smoke.js", b"alert(1)", "application/javascript")
    assert rejected.status_code == 422, rejected.status_code

    missing = list_media("definitely-not-here")
    assert missing.status_code == 404, missing.status_code


if __name__ == "__main__":
    main()
