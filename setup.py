import setuptools

VERSION = '0.1.0'

setup_params = dict(
    name='cached-endpoints',
    version=VERSION,
    keywords='requests cache http endpoint',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    description='Declarative HTTP endpoints with authentication, response caching and connectivity gating',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=['requests>=2.28'],
    extras_require={
        'dev': [
            'mockito>=1.4',
            'pytest>=7.0',
            'pytest-cov>=4.0',
            'ddt>=1.6',
        ]
    },
    entry_points={},
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'Natural Language :: English',
        'Operating System :: OS Independent',

        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
)


if __name__ == '__main__':
    setuptools.setup(**setup_params)
