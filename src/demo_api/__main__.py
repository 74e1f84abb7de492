"""``python -m demo_api`` serves RC4 demo ciphertexts for ``key-tickler demo1..3``."""

import uvicorn


def main():
    uvicorn.run("demo_api.api:app", host="127.0.0.1", port=8000, reload=True)


if __name__ == "__main__":
    main()
