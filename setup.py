#!/usr/bin/env python
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from setuptools import setup

setup(name='hypermock',
      version='0.1.0',
      py_modules=['hypermock'],
      python_requires='>=3.8',
      license='Apache License, Version 2.0',
      description='Interface mocking framework',
      long_description='''HyperMock creates mocks of Python classes and
registers expectations for their methods, properties and events with plain
lambdas, in the setup-exercise-verify style.''',
      )
