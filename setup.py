from setuptools import setup, find_packages

setup(
    name="homehosts",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={
        "homehosts": ["templates/*.plist", "templates/*.service"],
    },
    install_requires=[
        "click>=8.0",
        "toml",
        "pyobjc-framework-CoreWLAN; sys_platform == 'darwin'",
        "pyobjc-framework-CoreLocation; sys_platform == 'darwin'",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "homehosts=homehosts.cli:cli",
        ],
    },
    python_requires=">=3.9",
    author="HomeHosts Contributors",
    description="Switch hosts file entries depending on the current Wi-Fi network",
    long_description="A background service that adds hosts entries on home Wi-Fi networks and removes them elsewhere, coexisting with SwitchHosts.",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: MacOS",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Networking",
        "Topic :: System :: Systems Administration",
    ],
)
