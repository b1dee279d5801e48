# -*- coding: utf-8 -*-
#################### IMPORTS
import io
import os
import sys
#
from setuptools import setup, Command
#
#################### GLOBAL VARIABLES
MINIMUM_PYTHON = (3, 8)
LINE_STARS = '*' * 75
ENTMOOT = 'entmoot'
CURRENT = '.'
#
RUNTESTS = os.path.join(CURRENT, ENTMOOT)
#
README = "README.md"
SHORT_DESCRIPTION = "An in-process engine for Entish, a small Datalog-like "\
"language of facts, inferences and claims."

#################### SYSTEM ANALYSIS
#
if sys.version_info < MINIMUM_PYTHON:
    raise Exception("entmoot requires Python %s.%s or higher." % MINIMUM_PYTHON)

######################## CLASSES

class PyTest(Command):
    """
    For "python setup.py test" working.
    Have a look at http://pytest.org/latest/goodpractises.html#
    integrating-with-distutils-python-setup-py-test
    """
    #
    user_options = []
    def initialize_options(self):
        """
        Subclassing abstract class Command
        """
        pass
    #
    def finalize_options(self):
        """
        Subclassing abstract class Command
        """
        pass

    def run(self):
        import subprocess
        errno = subprocess.call([sys.executable, '-m', 'pytest', RUNTESTS])
        raise SystemExit(errno)

#
##################### FUNCTIONS
#
def _read(*filenames, **kwargs):
    """
    Read the docs and give a long description.
    """
    encoding = kwargs.get('encoding', 'utf-8')
    sep = kwargs.get('sep', '\n')
    buf = []
    for filename in filenames:
        try:
            with io.open(filename, encoding=encoding) as _fic:
                buf.append(_fic.read())
        except IOError:
            pass
    return sep.join(buf)


def _version():
    """
    Read __version__ without importing the package.
    """
    namespace = {}
    with io.open(os.path.join(ENTMOOT, 'version.py'), encoding='utf-8') as _fic:
        exec(_fic.read(), namespace)
    return namespace['__version__']

#
############## PREPARING SETUP VALUES
#
_LONG_DESCRIPTION = _read(README)
#
CMDCLASS = {'test': PyTest}
#

####################### MAIN

setup(
    name = ENTMOOT,
    packages = [ENTMOOT],
    version = _version(),
    cmdclass = CMDCLASS,
    description = SHORT_DESCRIPTION,
    python_requires = '>=3.8',
    install_requires = [],
    extras_require = {'test': ['pytest']},
    keywords = "datalog, logic programming, rules engine, dice, tabletop games, expert system",
    classifiers = [
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Interpreters",
        "License :: OSI Approved :: GNU Library or Lesser General Public License (LGPL)",
        "Operating System :: OS Independent",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        ],
    long_description = _LONG_DESCRIPTION,
    long_description_content_type = "text/markdown",
)
