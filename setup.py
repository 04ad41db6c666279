# Copyright (c) 2013-2025 NASK. All rights reserved.

import glob
import os.path as osp
import sys

from setuptools import setup, find_packages


setup_dir, setup_filename = osp.split(osp.abspath(__file__))
setup_human_readable_ref = osp.join(osp.basename(setup_dir), setup_filename)

def get_txtconv_version(filename_base):
    path_base = osp.join(setup_dir, filename_base)
    path_glob_pattern = path_base + '*'
    # The non-suffixed path variant should be
    # tried only if another one does not exist.
    matching_paths = sorted(glob.iglob(path_glob_pattern),
                            reverse=True)
    try:
        path = matching_paths[0]
    except IndexError:
        sys.exit('[{}] Cannot determine the txtconv version '
                 '(no files match the pattern {!a}).'
                 .format(setup_human_readable_ref,
                         path_glob_pattern))
    try:
        with open(path, encoding='ascii') as f:
            return f.read().strip()
    except (OSError, UnicodeError) as exc:
        sys.exit('[{}] Cannot determine the txtconv version '
                 '(an error occurred when trying to '
                 'read it from the file {!a} - {}).'
                 .format(setup_human_readable_ref,
                         path,
                         exc))


txtconv_version = get_txtconv_version('.txtconv-version')

requirements = []
with open(osp.join(setup_dir, 'requirements'), encoding='ascii') as f:
    for raw_line in f:
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue
        requirements.append(line)

test_requirements = [
    'pytest',
    'unittest_expander',
]

dev_requirements = [
    'invoke',
]


setup(
    name="txtconv",
    version=txtconv_version,

    packages=find_packages(include=['txtconv', 'txtconv.*']),
    package_data={'txtconv': ['data/conf/*.conf']},
    install_requires=requirements,
    extras_require={
        'tests': test_requirements,
        'dev': dev_requirements + test_requirements,
    },
    python_requires='>=3.11',
    include_package_data=True,
    zip_safe=False,
    entry_points={
        'console_scripts': [
            'txtconv = txtconv.cli:main',
        ],
    },

    description=('Parsing and formatting of URLs, query strings, '
                 'numbers with unit suffixes, byte sizes and percentages.'),
    maintainer='CERT Polska',
    maintainer_email='n6@cert.pl',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU Affero General Public License v3',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3.11',
        'Topic :: Software Development :: Libraries',
        'Topic :: Text Processing',
    ],
    keywords='url query string number units byte size percent parsing formatting',
)
