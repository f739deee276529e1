#
# N-dimensional simplex noise over numpy point arrays, with fractal Brownian
# motion on top.
#
# Based on example code by Stefan Gustavson (stegu@itn.liu.se).
# Optimisations by Peter Eastman (peastman@drizzle.stanford.edu).
# Better rank ordering method by Stefan Gustavson in 2012.
#
# This code was placed in the public domain by its original author,
# Stefan Gustavson. You may use it as you see fit, but
# attribution is appreciated.
#
#
import sys
import itertools
import numpy


# returns floor of floating point array by coercing to integer
def fastfloor(x):
    return numpy.array(numpy.floor(x), dtype = numpy.int64)


def gradients(N):
    # edge and corner directions of the N-cube
    grad = ((0,-1,1),)*N
    grad = numpy.array(list(itertools.product(*grad))[1:])
    return grad[numpy.abs(grad).sum(-1)>=N-1]


#  # N-D simplex noise, better simplex rank ordering method 2012-03-09
class SimplexNoise:
    def __init__(self,seed=0):
        # private generator: same seed, same table, whatever else is using numpy.random
        rng = numpy.random.RandomState(seed % 2**32)
        p0 = rng.permutation(256)
        # To remove the need for index wrapping, double the permutation table length
        self.perm0 = p0[numpy.arange(512) & 255]
        self._grad = {}

    def noise(self, Z):
        """ Evaluate the noise at the points Z, an (M, N) array of
        N-dimensional coordinates. Returns M values in roughly [-1, 1].

        """
        Z = numpy.asarray(Z, dtype=numpy.float64)
        # Skew the (x,y,z,w) space to determine which cell of simplices we're in
        N = Z.shape[-1] #number of dimensions
        N1 = N+1 # number of simplex corners
        Fn = 1.0*(N1**0.5 - 1)/N
        Gn = 1.0*(N1 - N1**0.5)/N/N1

        #skew the Z data and store in z0
        s = Z.sum(-1) * Fn # Factor for skewing
        i = fastfloor(Z+s[:,numpy.newaxis])
        t = (i.sum(-1) * Gn) # Factor for unskewing
        Z0 = i - t[:,numpy.newaxis]
        z0 = Z - Z0

        # Use magnitude ordering to determine the simplices that the point z0 is located in
        rank = numpy.zeros(Z.shape, dtype=numpy.int64)
        for l,k in itertools.combinations(range(N),2):
            rank[:,k] += z0[:,k]>=z0[:,l]
            rank[:,l] += z0[:,k]<z0[:,l]

        # ind will contain the skewed offsets of the N+1 simplex corners
        b = numpy.arange(N1)[:,numpy.newaxis,numpy.newaxis]
        ind = rank >= N - b
        # zk contains the locations of the point relative to each corner
        zk = z0 - ind + 1.0 * b * Gn

        # Only the hash wraps to the permutation size; z0/zk above use the
        # unwrapped lattice so large coordinates stay exact.
        indi = (i + ind) & 255
        grad = self._grad.get(N)
        if grad is None:
            grad = self._grad[N] = gradients(N)

        gik = 0
        for x in range(N-1,-1,-1):
            gik = self.perm0[indi[:,:,x] + gik]
        gik = gik%(grad.shape[0])
        # Calculate the contribution from the simplices
        tk = 0.5 - (zk*zk).sum(-1)
        tp = tk>=0
        tk = tp * tk * tk
        nk = tp * tk * tk * (grad[gik]*zk).sum(-1)

        # Sum up and scale the result to cover the range [-1,1]
        return nk.sum(0) * (2**6 )


def fbm(Z, simplex, octaves=5, lacunarity=2.0, gain=0.5, frequency=1.0):
    """ Fractal Brownian motion: `octaves` layers of simplex noise, each at
    `lacunarity` times the frequency and `gain` times the amplitude of the
    previous one, normalised by the summed amplitude.

    """
    Z = numpy.asarray(Z, dtype=numpy.float64)
    amp = 1.0
    total = 0.0
    val = numpy.zeros(Z.shape[0])
    for _ in range(octaves):
        val += amp * simplex.noise(Z * frequency)
        total += amp
        frequency *= lacunarity
        amp *= gain
    if total > 0:
        val /= total
    return val


def grid(origin, size, dims):
    """ Integer world coordinates of a size^dims window starting at `origin`.

    Returns a (size**dims, dims) float array with columns (x, y[, z]),
    ordered so that it reshapes to [y, x] or [z, y, x].

    """
    idx = numpy.indices((size,) * dims).reshape(dims, -1)[::-1].T
    return (idx + numpy.array(origin[:dims])).astype(numpy.float64)


if __name__ == '__main__':
    import time
    from PIL import Image

    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 3332
    path = sys.argv[2] if len(sys.argv) > 2 else 'noise2.png'
    size = 256
    simplex = SimplexNoise(seed)
    t = time.time()
    n = fbm(grid((0, 0), size, 2), simplex, octaves=5, frequency=0.04).reshape(size, size)
    print('fbm 2d', time.time() - t)
    print('STATS')
    print('######')
    print(n.min(), n.max(), numpy.average(n))
    n = numpy.array((n - n.min()) / (n.max() - n.min()) * 255, dtype='u1')
    im = Image.fromarray(n, 'L')
    im.save(path)
    print('saved', path, im.size)
