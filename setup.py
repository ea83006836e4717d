from setuptools import setup, find_packages

setup(
    name='webview-sync',
    version='1.0.0',
    description='Mirror WebView static assets into iOS and Android build directories',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=[
        'xxhash>=3.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'webview-sync=webview_sync.cli.controller:main',
        ]
    }
)
