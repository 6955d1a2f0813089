import setuptools

setuptools.setup(
    name="palpad_tools",
    version="0.1",
    author="Jared Grimes",
    description="Pal Pad: Pokémon TCG card search, deck building and JSON export",
    packages=["controllers", "repositories", "services", "utils"],
    py_modules=["main"],
    package_data={"services": ["resources/*.json"]},
    classifiers=["Programming Language :: Python :: 3"],
    python_requires=">=3.11",
    install_requires=[
        "loguru",
        "pillow",  # Thumbnail decode and resize
        "curl_cffi",  # Card metadata and image downloads
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={"console_scripts": ["palpad=main:main"]},
)
