from setuptools import setup


setup(
    name="site-checklist",
    version="0.3.0",
    description="Decode construction-site inspection checklists, roll up scores and write them back with merged categories",
    packages=["site_checklist"],
    python_requires=">=3.10",
    install_requires=[
        "pandas<3",
        "openpyxl",
    ],
    extras_require={
        "excel-legacy": ["xlrd"],
        "all": ["xlrd"],
    },
    entry_points={
        "console_scripts": [
            "site-checklist=site_checklist.cli:main",
        ]
    },
)
