import io
import re

from setuptools import find_packages, setup

__version__ = re.search(
    r'__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
    io.open("src/mtsboot/version.py", encoding="utf_8_sig").read(),
).group(1)


setup(
    name="mtsboot",
    version=__version__,
    description="mtsboot turns a textual configuration into a registered pool of compute workers and a loaded utility plugin.",
    long_description="""mtsboot turns a textual configuration into a registered pool of compute workers and a loaded utility plugin.""",
    author="",
    author_email="",
    package_dir={"": "src"},
    packages=find_packages("src"),
    zip_safe=False,
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2",
        "fire",
        "typing_extensions",
    ],
    extras_require={
        "tests": ["pytest"],
    },
    entry_points={
        "console_scripts": ["mtsboot=mtsboot.__main__:cli"],
    },
)
