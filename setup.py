from setuptools import find_packages, setup

setup(
    name="RxLens",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app"],
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "python-multipart>=0.0.9",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "Pillow>=10.0",
        "PyMuPDF>=1.24.3",
        "google-generativeai>=0.5",
        "ollama>=0.2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.25",
        ],
    },
    description="RxLens: transcribe handwritten prescriptions with a vision model and export PDF reports",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown"
)
