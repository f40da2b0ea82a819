from setuptools import setup
import os
import re

def read(*names):
    values = dict()
    for name in names:
        filename = name + '.rst'
        if os.path.isfile(filename):
            fd = open(filename)
            value = fd.read()
            fd.close()
        else:
            value = ''
        values[name] = value
    return values


long_description = """
%(README)s

News
====
%(CHANGES)s
""" % read('README', 'CHANGES')

def get_version(pkg):
    path = os.path.join(os.path.dirname(__file__),pkg,'__init__.py')
    with open(path) as fh:
        m = re.search(r'^__version__\s*=\s*[\'"]([^\'"]+)[\'"]',fh.read(),re.M)
    if m:
        return m.group(1)
    raise RuntimeError("Unable to find __version__ string in %s." % path)

setup(name='python-nagios-metric-plugins',
      version=get_version('nagmetric'),
      description='Nagios checks for SONAS clusters, OpenVZ containers and Raspberry Pi boards.',
      long_description=long_description,
      classifiers=[
          "Intended Audience :: System Administrators",
          "Development Status :: 4 - Beta",
          "Programming Language :: Python :: 3",
          "Topic :: System :: Monitoring",
      ],
      keywords='nagios sonas openvz raspberry monitoring',
      url='https://github.com/elapouya/python-nagios-helpers',
      author='Eric Lapouyade',
      author_email='elapouya@gmail.com',
      license='LGPL 2.1',
      packages=['nagmetric', 'nagmetric.plugins'],
      install_requires = ['paramiko',
                          'pexpect',
                          'python-textops3',
                          ],
      extras_require = {'test': ['pytest']},
      entry_points = {
          'console_scripts': [
              'nagmetric = nagmetric.launcher:main',
              'check_sonas_perfdata = nagmetric.plugins.sonas_perfdata:main',
              'check_sonas_inodes = nagmetric.plugins.sonas_inodes:main',
              'check_sonas_smbsessions = nagmetric.plugins.sonas_smbsessions:main',
              'check_sonas_vfswarnings = nagmetric.plugins.sonas_vfswarnings:main',
              'check_sonas_health = nagmetric.plugins.sonas_health:main',
              'check_sonas_repl = nagmetric.plugins.sonas_repl:main',
              'check_openvz_mem = nagmetric.plugins.openvz_mem:main',
              'check_rpi_temp = nagmetric.plugins.rpi_temp:main',
          ],
      },
      zip_safe=False)
