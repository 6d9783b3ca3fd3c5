#
# r2epub distribution
#

from setuptools import setup

VERSION = '1.2.4'

setup (
    name = 'r2epub',
    version = VERSION,

    packages = [
        'r2epub',
        'r2epub.parsers',
        'r2epub.writers',
    ],

    scripts = [
        'scripts/r2epub',
        'scripts/r2epub-server',
    ],

    install_requires = [
        'beautifulsoup4',
        'chardet',
        'cherrypy',
        'cssutils',
        'html5lib',
        'lxml',
        'pydantic>=2',
        'requests',
        'libgutenberg>=0.8.11',
    ],

    python_requires = '>=3.9',

    data_files = [
        ('', ['CHANGES', 'README.md']),
    ],

    # metadata for upload to PyPI

    author = "The r2epub authors",
    description = "Convert W3C ReSpec documents, or collections of them, to EPUB 3.2.",
    long_description = open ('README.md', encoding='utf-8').read (),
    long_description_content_type = 'text/markdown',
    license = "GPL v3",
    keywords = "epub w3c respec technical report conversion",
    url = "https://github.com/iherman/r2epub/",

    classifiers = [
        "Topic :: Text Processing",
        "License :: OSI Approved :: GNU General Public License (GPL)",
        "Environment :: Console",
        "Environment :: Web Environment",
        "Operating System :: OS Independent",
        "Intended Audience :: Other Audience",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.9",
    ],

    platforms = 'OS-independent'
)
