from setuptools import setup, find_packages

setup(
    name="teafinder",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "boto3>=1.28.0",
        "mypy-boto3-dynamodb>=1.28.0",
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
        "tenacity>=8.2.3",
        "pydantic>=2.0.0",
        "bcrypt>=4.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-mock>=3.10.0",
            "moto[dynamodb]>=5.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
        ]
    },
    python_requires=">=3.11",
)
