from setuptools import setup, find_packages

setup(
    name="interview_assistant",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.104.0",
        "uvicorn>=0.24.0",
        "python-dotenv>=1.0.0",
        "pydantic[email]>=2.4.2",
        "pydantic-settings>=2.0.3",
        "structlog>=23.2.0",
        "openai>=1.3.0",
        "aiofiles>=23.2.1",
        "python-multipart>=0.0.6",
        "pdfplumber>=0.10.0",
        "python-docx>=1.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.25.0",
        ],
    },
)
