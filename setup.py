from setuptools import setup

setup(
    name="screeps-client",
    author="screeps-grafana contributors",
    version="1.0",
    package_dir={'': 'src'},
    package_data={"screeps_client": ["py.typed"]},
    packages=["screeps_client"],
    python_requires=">=3.8",
    install_requires=[
        "aiohttp>=3.8",
        "galaxy.plugin.api>=0.69",
        "certifi",
        "yarl",
    ],
    extras_require={
        "test": ["pytest>=7", "pytest-asyncio>=0.21"],
    },
)
