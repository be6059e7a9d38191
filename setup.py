from setuptools import setup, find_packages

setup(
  name='slotdispatch',
  version='0.1',
  description='Dispatch a command to the first underloaded host of a build farm',
  packages=find_packages(exclude=['tests', 'tests.*']),
  python_requires='>=3.11',
  install_requires=[
    'psutil', 'termcolor>=2.1'
  ],
  extras_require={
    'test': ['pytest'],
  },
  entry_points={
    'console_scripts': ['slotdispatch=slotdispatch.cli:run'],
  },
)
