from setuptools import setup

__version__ = "1.0.0"
__license__ = "Apache v2"

setup( name = 'fragmentbridge',
       version = __version__,
       description = 'Loopback bridge for OAuth2 implicit-grant logins in desktop applications',
       license = __license__,
       packages = [ 'fragmentbridge' ],
       zip_safe = True,
       python_requires = '>=3.8',
       install_requires = [ 'pyyaml', 'rich' ],
       extras_require = {
           'test': [ 'pytest', 'requests' ],
       },
       long_description = 'Serves a bridge page on a loopback port that moves an implicit-grant access token from the URL fragment back to the application.',
       entry_points = {
           'console_scripts': [
               'fragmentbridge=fragmentbridge.__main__:main',
           ],
       },
)
