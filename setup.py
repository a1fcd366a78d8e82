from setuptools import setup, find_packages

setup(
    name='pymail',
    version='0.1.0',
    packages=find_packages(exclude=['tests']),
    install_requires=[
        'pycryptodome'
    ],
    extras_require={
        'test': ['pytest']
    },
    author='Tom Tzook',
    author_email='tomtzook@gmail.com',
    description='RFC 2822/5322 Header Fields for Python'
)
