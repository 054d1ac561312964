import os
from setuptools import setup
import platform
import codecs

if platform.system() != "Windows":
    readme_path = os.path.join(os.path.dirname(__file__), 'README.rst')
    with codecs.open(readme_path, encoding='utf8') as f:
        readme = f.read()
else:
    # The format is messed up with extra line breaks when building wheels on windows.
    # Skip readme in this case.
    readme = "Leak reports from malloc/free logs."

setup(
    name='leaklog',
    version='0.1.0',
    description='Leak reports reconstructed from malloc/free logs',
    long_description=readme,
    long_description_content_type='text/x-rst',
    license='MIT',
    py_modules=['_leaklog_version'],
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Software Development :: Debuggers',
    ],
    install_requires=['pyrsistent>=0.18'],
    extras_require={'test': ['pytest', 'hypothesis']},
    entry_points={'console_scripts': ['leaklog = leaklog._cli:main']},
    packages=['leaklog'],
    package_data={'leaklog': ['py.typed', '__init__.pyi']},
    python_requires='>=3.8',
)
