"""
Static project files for a generated TypeScript package.

These are fixed configuration blobs; only the package name is interpolated.
"""

import json
from typing import List

from .base import GeneratedFile


PACKAGE_DEV_DEPENDENCIES = {
    '@types/jest': '^27.4.1',
    '@types/node': '^17.0.31',
    '@typescript-eslint/eslint-plugin': '^5.22.0',
    '@typescript-eslint/parser': '^5.22.0',
    'eslint': '^8.15.0',
    'eslint-config-prettier': '^8.5.0',
    'eslint-plugin-prettier': '^4.0.0',
    'jest': '^27.5.1',
    'prettier': '^2.6.2',
    'ts-jest': '^27.1.4',
    'typescript': '^4.6.4',
}

PACKAGE_DEPENDENCIES = {
    'aptos': '^1.2.0',
    'big-integer': '^1.6.51',
    '@manahippo/move-to-ts': '^0.0.49',
}

TS_CONFIG = {
    'compilerOptions': {
        'target': 'es2016',
        'module': 'commonjs',
        'rootDir': './src',
        'moduleResolution': 'node',
        'declaration': True,
        'declarationMap': True,
        'sourceMap': True,
        'outDir': './dist',
        'esModuleInterop': True,
        'forceConsistentCasingInFileNames': True,
        'strict': True,
        'skipLibCheck': True,
    },
}

JEST_CONFIG = '''module.exports = {
  preset: "ts-jest",
  testEnvironment: "node",
  testPathIgnorePatterns: ["dist/*"],
};
'''


def _to_json(data: dict) -> str:
    return json.dumps(data, indent=2) + '\n'


def generate_package_json(package_name: str) -> GeneratedFile:
    content = {
        'name': package_name,
        'version': '0.0.1',
        'scripts': {
            'build': 'rm -rf dist; tsc -p tsconfig.json',
            'test': 'jest',
        },
        'main': 'dist/index.js',
        'typings': 'dist/index.d.ts',
        'files': ['src', 'dist'],
        'devDependencies': PACKAGE_DEV_DEPENDENCIES,
        'dependencies': PACKAGE_DEPENDENCIES,
    }
    return GeneratedFile('package.json', _to_json(content))


def generate_ts_config() -> GeneratedFile:
    return GeneratedFile('tsconfig.json', _to_json(TS_CONFIG))


def generate_jest_config() -> GeneratedFile:
    return GeneratedFile('jest.config.js', JEST_CONFIG)


def generate_scaffold(package_name: str) -> List[GeneratedFile]:
    """All project-level configuration files."""
    return [
        generate_package_json(package_name),
        generate_ts_config(),
        generate_jest_config(),
    ]
