import os
from setuptools import setup
from re import match, S

with open(os.path.join('mw_wikibot', '__init__.py'), 'r',
          encoding='utf-8') as f:
    contents = f.read()
    longdesc = match('^"""(.*?)"""', contents, S).group(1)
    version = match(r'[\s\S]*__version__[^\'"]+[\'"]([^\'"]+)[\'"]', contents).group(1)
    del contents

setup(
    name="mw-wikibot",
    version=version,
    description="A framework for writing MediaWiki bots.",
    long_description=longdesc,
    long_description_content_type='text/x-rst',
    url="https://github.com/Kenny2github/mw-api-client",
    author="Ken Hilton",
    license="MIT",
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Internet :: WWW/HTTP :: Dynamic Content :: Wiki',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
    keywords='mediawiki api bot requests',
    packages=["mw_wikibot", "mw_wikibot.tests"],
    install_requires=['requests'],
    extras_require={'test': ['pytest']},
    python_requires='>=3.7',
)
