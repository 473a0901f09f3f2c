import setuptools

with open("README.md", "r") as fh:
	long_description = fh.read()

with open('VERSION', 'r') as fh:
	VERSION = fh.read().strip()

setuptools.setup(
	name="archbase",
	version=VERSION,
	description="Arch Linux base install - system checks, guided disk layout, partitioning",
	long_description=long_description,
	long_description_content_type="text/markdown",
	packages=setuptools.find_packages(include=['archbase', 'archbase.*']),
	classifiers=[
		"Programming Language :: Python :: 3.12",
		"License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
		"Operating System :: POSIX :: Linux",
	],
	python_requires='>=3.12',
	install_requires=[
		'pydantic>=2',
	],
	extras_require={
		'test': ['pytest'],
	},
	entry_points={
		'console_scripts': [
			'archbase=archbase.main:main',
		],
	},
)
